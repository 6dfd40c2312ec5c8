import ipaddress
import logging

import pytest

from wg_tools.errors import AddressFormatError, PortFormatError, StructuralError
from wg_tools.models import Interface, Peer, TimeDuration, Transfer
from wg_tools.policy import FieldPolicy
from wg_tools.status import (
    InInterface,
    InPeer,
    NoInterface,
    StatusDecoder,
    decode_status,
    iter_status_lines,
)


def test_two_interfaces(wg_show):
    interfaces = decode_status(wg_show)

    assert [i.name for i in interfaces] == ["wg0", "wg1"]
    assert [len(i.peers) for i in interfaces] == [1, 1]


def test_interface_fields(wg_show):
    wg0 = decode_status(wg_show)[0]

    assert wg0.public_key == "public_key1"
    assert wg0.listening_port == 51820
    # "private key" n'est pas repris
    assert wg0.private_key is None


def test_peer_fields(wg_show):
    peer = decode_status(wg_show)[0].peers[0]

    assert peer.public_key == "public_key2"
    assert str(peer.endpoint) == "1.1.1.1:1"
    assert [str(n) for n in peer.allowed_ips] == ["1.1.2.0/24"]
    assert peer.latest_handshake == TimeDuration(91)
    assert peer.transfer == Transfer(received=1237319, sent=4078960)
    assert peer.persistent_keepalive == TimeDuration(25)
    assert peer.preshared_key is None


def test_second_interface_peer(wg_show):
    wg1 = decode_status(wg_show)[1]

    assert wg1.listening_port == 51821
    assert wg1.peers[0].public_key == "public_key4"
    assert wg1.peers[0].endpoint.addr == ipaddress.ip_address("81.71.149.31")


def test_count_matches_interface_markers():
    text = "\n".join(f"interface: wg{i}\n  listening port: {51820 + i}" for i in range(5))
    assert [i.listening_port for i in decode_status(text)] == [51820 + i for i in range(5)]


def test_empty_input():
    assert decode_status("") == []
    assert decode_status("\n\n   \n") == []


def test_multiple_peers_keep_order():
    text = """
interface: wg0
peer: a
  allowed ips: 10.0.0.1/32
peer: b
  allowed ips: 10.0.0.2/32, junk, 10.0.0.3/32
peer: c
"""
    wg0 = decode_status(text)[0]
    assert [p.public_key for p in wg0.peers] == ["a", "b", "c"]
    assert str(wg0.peers[1].allowed_ips) == "10.0.0.2/32,10.0.0.3/32"


def test_orphan_peer_lines_are_dropped():
    text = """
peer: orphan
  endpoint: 1.2.3.4:5
  public key: stray
interface: wg0
  public key: real
"""
    interfaces = decode_status(text)
    assert len(interfaces) == 1
    assert interfaces[0].public_key == "real"
    assert interfaces[0].peers == []


def test_public_key_after_peer_does_not_override_interface():
    text = """
interface: wg0
  public key: iface
peer: p1
  public key: something-else
"""
    assert decode_status(text)[0].public_key == "iface"


def test_peer_without_fields_keeps_defaults():
    peer = decode_status("interface: wg0\npeer: p1\n")[0].peers[0]
    assert peer == Peer(public_key="p1")
    assert peer.endpoint.is_unspecified()


def test_unknown_and_malformed_lines_are_ignored():
    text = """
interface: wg0
  fwmark: 0xca6c
  this line has no separator
  listening port:51820
"""
    wg0 = decode_status(text)[0]
    assert wg0.listening_port is None


def test_value_split_on_first_separator():
    text = "interface: wg0\npeer: p1\n  latest handshake: 5 seconds: ago\n"
    assert decode_status(text)[0].peers[0].latest_handshake == TimeDuration(5)


# ---------- politique HARD / SOFT ----------

def test_bad_listening_port_aborts():
    with pytest.raises(StructuralError) as exc:
        decode_status("interface: wg0\n  listening port: 99999\n")

    assert exc.value.line_number == 2
    assert isinstance(exc.value.field_error, PortFormatError)
    assert isinstance(exc.value.__cause__, PortFormatError)


def test_bad_endpoint_aborts():
    with pytest.raises(StructuralError) as exc:
        decode_status("interface: wg0\npeer: p1\n  endpoint: nowhere\n")
    assert isinstance(exc.value.field_error, AddressFormatError)


def test_policy_override_makes_endpoint_soft():
    text = "interface: wg0\npeer: p1\n  endpoint: nowhere\n"
    peer = decode_status(text, policy={"endpoint": FieldPolicy.SOFT})[0].peers[0]
    assert peer.endpoint.is_unspecified()


def test_policy_override_rejects_unknown_field():
    with pytest.raises(ValueError):
        decode_status("", policy={"mtu": FieldPolicy.HARD})


def test_bad_transfer_is_soft():
    text = "interface: wg0\npeer: p1\n  transfer: lots received, more sent\n"
    assert decode_status(text)[0].peers[0].transfer == Transfer(0, 0)


# ---------- automate ----------

def test_state_transitions():
    decoder = StatusDecoder()
    assert isinstance(decoder.state, NoInterface)

    decoder.feed("interface", "wg0")
    assert isinstance(decoder.state, InInterface)
    assert decoder.state.interface.name == "wg0"

    decoder.feed("peer", "p1")
    assert isinstance(decoder.state, InPeer)
    assert decoder.state.peer.public_key == "p1"

    decoder.feed("peer", "p2")
    assert decoder.state.peer.public_key == "p2"
    assert [p.public_key for p in decoder.state.interface.peers] == ["p1"]

    decoder.feed("interface", "wg1")
    assert isinstance(decoder.state, InInterface)
    assert decoder.interfaces == [Interface(name="wg0", peers=[Peer("p1"), Peer("p2")])]

    result = decoder.finish()
    assert [i.name for i in result] == ["wg0", "wg1"]
    assert isinstance(decoder.state, NoInterface)


def test_iter_status_lines():
    lines = list(iter_status_lines("interface: wg0\n\n  peer: abc=\nnoise\n"))
    assert lines == [(1, "interface", "wg0"), (3, "peer", "abc=")]


def test_hard_allowed_ips_rejects_bad_entry():
    text = "interface: wg0\npeer: p1\n  allowed ips: junk, 10.0.0.1/32\n"
    assert len(decode_status(text)[0].peers[0].allowed_ips) == 1

    with pytest.raises(StructuralError) as exc:
        decode_status(text, policy={"allowed ips": FieldPolicy.HARD})
    assert exc.value.line_number == 3
    assert exc.value.field_error.raw_value == "junk"


def test_hard_transfer_rejects_bad_counter():
    text = "interface: wg0\npeer: p1\n  transfer: lots received, 1 KiB sent\n"
    with pytest.raises(StructuralError):
        decode_status(text, policy={"transfer": FieldPolicy.HARD})


def test_policy_accepts_string_values():
    text = "interface: wg0\npeer: p1\n  endpoint: nowhere\n"
    with pytest.raises(StructuralError):
        decode_status(text, policy={"endpoint": "hard"})
    assert decode_status(text, policy={"endpoint": "soft"})[0].peers[0].endpoint.is_unspecified()


def test_policy_rejects_unknown_value():
    with pytest.raises(ValueError):
        decode_status("", policy={"endpoint": "strict"})


def test_peer_fields_without_peer_do_not_abort():
    text = """
interface: wg0
  endpoint: nowhere
  latest handshake: ???
  persistent keepalive: whenever
  listening port: 51820
"""
    wg0 = decode_status(text)[0]
    assert wg0.peers == []
    assert wg0.listening_port == 51820


def test_listening_port_before_interface_is_ignored():
    text = "listening port: junk\ninterface: wg0\n  listening port: 51820\n"
    interfaces = decode_status(text)
    assert [(i.name, i.listening_port) for i in interfaces] == [("wg0", 51820)]


def test_public_key_inside_peer_is_logged(caplog):
    text = "interface: wg0\npeer: p1\n  public key: something-else\n"
    with caplog.at_level(logging.DEBUG, logger="wg_tools.status"):
        decode_status(text)
    assert "line 3: public key outside of an interface header" in caplog.text
