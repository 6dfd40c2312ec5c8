# src/wg_tools/models.py
from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterator, List, Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNet = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]

UNSPECIFIED_ADDRESS = ipaddress.IPv4Address(0)


@dataclass(frozen=True)
class AddrPort:
    addr: IPAddress = UNSPECIFIED_ADDRESS
    port: int = 0          # large volontairement (u64 côté wg)

    def is_unspecified(self) -> bool:
        return self.addr == UNSPECIFIED_ADDRESS and self.port == 0

    def __str__(self) -> str:
        return f"{self.addr}:{self.port}"


@dataclass(frozen=True)
class TimeDuration:
    """Durée écoulée ou intervalle, en secondes entières."""

    seconds: int = 0

    def to_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds)


@dataclass(frozen=True)
class Transfer:
    received: int = 0      # octets
    sent: int = 0


@dataclass
class AllowedIPs:
    networks: List[IPNet] = field(default_factory=list)

    def __iter__(self) -> Iterator[IPNet]:
        return iter(self.networks)

    def __len__(self) -> int:
        return len(self.networks)

    def __bool__(self) -> bool:
        return bool(self.networks)

    def __str__(self) -> str:
        return ",".join(str(n) for n in self.networks)


@dataclass
class Peer:
    public_key: Optional[str] = None
    preshared_key: Optional[str] = None
    latest_handshake: Optional[TimeDuration] = None
    endpoint: AddrPort = field(default_factory=AddrPort)
    allowed_ips: AllowedIPs = field(default_factory=AllowedIPs)
    transfer: Optional[Transfer] = None
    persistent_keepalive: Optional[TimeDuration] = None

    def is_none(self) -> bool:
        return self.public_key is None


@dataclass
class Interface:
    name: Optional[str] = None             # ex: "wg0"
    public_key: Optional[str] = None
    private_key: Optional[str] = None      # "(hidden)" dans la sortie de wg show
    listening_port: Optional[int] = None   # ex: 51820
    address: Optional[IPNet] = None        # ex: "10.13.13.2/24"
    dns: Optional[IPAddress] = None
    peers: List[Peer] = field(default_factory=list)

    def is_none(self) -> bool:
        return self.name is None
