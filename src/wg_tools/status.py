# src/wg_tools/status.py
"""
Décodage de la sortie texte de `wg show`.

    interface: wg0
      public key: ...
      listening port: 51820

    peer: ...
      endpoint: 1.1.1.1:1
      allowed ips: 1.1.2.0/24

Les lignes `interface:` et `peer:` ouvrent un nouvel enregistrement ; les
autres lignes complètent l'enregistrement ouvert. Le regroupement est un
automate à trois états (NoInterface, InInterface, InPeer) qui porte les
objets en cours de construction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .models import Interface, Peer
from .policy import STATUS_POLICY, FieldPolicy, apply_field, is_hard, resolve_policy
from .values import (
    parse_addr_port,
    parse_allowed_ips,
    parse_duration,
    parse_port,
    parse_transfer,
)

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ": "


# ---------- États ----------

@dataclass(frozen=True)
class NoInterface:
    pass


@dataclass(frozen=True)
class InInterface:
    interface: Interface


@dataclass(frozen=True)
class InPeer:
    interface: Interface
    peer: Peer


State = Union[NoInterface, InInterface, InPeer]


# ---------- Découpage ----------

def iter_status_lines(text: str) -> Iterator[Tuple[int, str, str]]:
    """Retourne (numéro de ligne, clé, valeur) pour chaque ligne `clé: valeur`."""
    for line_number, line in enumerate(text.splitlines(), start=1):
        key, sep, value = line.strip().partition(KEY_SEPARATOR)
        if not sep:
            continue
        yield line_number, key.strip(), value.strip()


# ---------- Automate ----------

class StatusDecoder:
    def __init__(self, policy: Optional[Mapping[str, FieldPolicy]] = None) -> None:
        self.policy = resolve_policy(STATUS_POLICY, policy)
        self.state: State = NoInterface()
        self.interfaces: List[Interface] = []
        self._handlers: Dict[str, Callable[[str, Optional[int]], None]] = {
            "interface": self._on_interface,
            "public key": self._on_public_key,
            "listening port": self._on_listening_port,
            "peer": self._on_peer,
            "endpoint": self._on_endpoint,
            "allowed ips": self._on_allowed_ips,
            "latest handshake": self._on_latest_handshake,
            "transfer": self._on_transfer,
            "persistent keepalive": self._on_persistent_keepalive,
        }

    def feed(self, key: str, value: str, line_number: Optional[int] = None) -> None:
        handler = self._handlers.get(key)
        if handler is None:
            return
        handler(value, line_number)

    def finish(self) -> List[Interface]:
        self._close_peer()
        self._close_interface()
        return self.interfaces

    # --- transitions ---

    def _close_peer(self) -> None:
        if isinstance(self.state, InPeer):
            self.state.interface.peers.append(self.state.peer)
            self.state = InInterface(self.state.interface)

    def _close_interface(self) -> None:
        if isinstance(self.state, InInterface) and not self.state.interface.is_none():
            self.interfaces.append(self.state.interface)
        self.state = NoInterface()

    def _current_peer(self, key: str, line_number: Optional[int]) -> Optional[Peer]:
        if isinstance(self.state, InPeer):
            return self.state.peer
        logger.debug("line %s: %r outside of a peer, ignored", line_number, key)
        return None

    def _parse(self, key: str, parser, value: str, line_number: Optional[int]):
        return apply_field(self.policy, key, parser, value, line_number=line_number)

    # --- handlers ---

    def _on_interface(self, value: str, line_number: Optional[int]) -> None:
        self._close_peer()
        self._close_interface()
        self.state = InInterface(Interface(name=value))

    def _on_public_key(self, value: str, line_number: Optional[int]) -> None:
        # Les champs de l'interface précèdent toujours le premier `peer:`
        if isinstance(self.state, InInterface):
            self.state.interface.public_key = value
        else:
            logger.debug("line %s: public key outside of an interface header, ignored", line_number)

    def _on_listening_port(self, value: str, line_number: Optional[int]) -> None:
        if isinstance(self.state, NoInterface):
            logger.debug("line %s: listening port without interface, ignored", line_number)
            return
        port = self._parse("listening port", parse_port, value, line_number)
        if port is not None:
            self.state.interface.listening_port = port

    def _on_peer(self, value: str, line_number: Optional[int]) -> None:
        if isinstance(self.state, NoInterface):
            logger.debug("line %s: peer %r without interface, dropped", line_number, value)
            return
        self._close_peer()
        self.state = InPeer(self.state.interface, Peer(public_key=value))

    def _on_endpoint(self, value: str, line_number: Optional[int]) -> None:
        peer = self._current_peer("endpoint", line_number)
        if peer is None:
            return
        endpoint = self._parse("endpoint", parse_addr_port, value, line_number)
        if endpoint is not None:
            peer.endpoint = endpoint

    def _on_allowed_ips(self, value: str, line_number: Optional[int]) -> None:
        peer = self._current_peer("allowed ips", line_number)
        if peer is None:
            return
        parser = partial(parse_allowed_ips, strict=is_hard(self.policy, "allowed ips"))
        allowed = self._parse("allowed ips", parser, value, line_number)
        if allowed is not None:
            peer.allowed_ips.networks.extend(allowed)

    def _on_latest_handshake(self, value: str, line_number: Optional[int]) -> None:
        peer = self._current_peer("latest handshake", line_number)
        if peer is not None:
            peer.latest_handshake = self._parse(
                "latest handshake", parse_duration, value, line_number
            )

    def _on_transfer(self, value: str, line_number: Optional[int]) -> None:
        peer = self._current_peer("transfer", line_number)
        if peer is not None:
            parser = partial(parse_transfer, strict=is_hard(self.policy, "transfer"))
            peer.transfer = self._parse("transfer", parser, value, line_number)

    def _on_persistent_keepalive(self, value: str, line_number: Optional[int]) -> None:
        peer = self._current_peer("persistent keepalive", line_number)
        if peer is not None:
            peer.persistent_keepalive = self._parse(
                "persistent keepalive", parse_duration, value, line_number
            )


def decode_status(
    text: str,
    policy: Optional[Mapping[str, FieldPolicy]] = None,
) -> List[Interface]:
    """
    Décode la sortie de `wg show` en une liste d'Interface, dans l'ordre
    d'apparition. Lève StructuralError si un champ HARD est illisible.
    """
    decoder = StatusDecoder(policy)
    for line_number, key, value in iter_status_lines(text):
        decoder.feed(key, value, line_number)
    return decoder.finish()
