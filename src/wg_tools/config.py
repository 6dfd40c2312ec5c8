# src/wg_tools/config.py
"""
Décodage des fichiers de configuration WireGuard (wg0.conf / wg showconf).

Le texte est d'abord découpé en sections `[Nom]` dans l'ordre du fichier
(un même nom peut revenir, chaque [Peer] est un enregistrement distinct),
puis chaque section est projetée sur le modèle champ par champ.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, Iterator, List, Mapping, Optional, TypeVar

from .errors import StructuralError
from .models import AddrPort, AllowedIPs, Interface, Peer
from .policy import CONFIG_POLICY, FieldPolicy, apply_field, is_hard, resolve_policy
from .values import (
    parse_addr_port,
    parse_allowed_ips,
    parse_cidr,
    parse_duration,
    parse_ip,
    parse_key,
    parse_port,
)

logger = logging.getLogger(__name__)

INTERFACE_SECTION = "Interface"
PEER_SECTION = "Peer"
COMMENT_PREFIXES = ("#", ";")

T = TypeVar("T")


@dataclass
class Section:
    name: str
    line_number: int
    values: Dict[str, str] = field(default_factory=dict)


def iter_sections(text: str) -> Iterator[Section]:
    current: Optional[Section] = None

    for line_number, raw in enumerate(text.splitlines(), start=1):
        # "#" termine la ligne, comme dans wg(8)
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        if line.startswith("[") and line.endswith("]"):
            if current is not None:
                yield current
            current = Section(name=line[1:-1].strip(), line_number=line_number)
            continue

        key, sep, value = line.partition("=")
        if not sep or current is None:
            logger.debug("line %d ignored: %r", line_number, raw)
            continue
        # une clé répétée garde sa dernière valeur
        current.values[key.strip()] = value.strip()

    if current is not None:
        yield current


class _SectionReader:
    def __init__(self, section: Section, policy: Mapping[str, FieldPolicy]) -> None:
        self.section = section
        self.policy = policy

    def get(self, key: str, parser: Callable[[str], T], default: Optional[T] = None) -> Optional[T]:
        raw = self.section.values.get(key)
        if raw is None:
            return default
        return apply_field(
            self.policy, key, parser, raw,
            default=default, line_number=self.section.line_number,
        )


def _read_interface(section: Section, policy: Mapping[str, FieldPolicy], name: Optional[str]) -> Interface:
    r = _SectionReader(section, policy)
    return Interface(
        name=name,
        private_key=r.get("PrivateKey", parse_key),
        listening_port=r.get("ListenPort", parse_port),
        address=r.get("Address", parse_cidr),
        dns=r.get("DNS", parse_ip),
    )


def _read_peer(section: Section, policy: Mapping[str, FieldPolicy]) -> Peer:
    r = _SectionReader(section, policy)
    allowed_ips = partial(parse_allowed_ips, strict=is_hard(policy, "AllowedIPs"))
    return Peer(
        public_key=r.get("PublicKey", parse_key),
        preshared_key=r.get("PresharedKey", parse_key),
        persistent_keepalive=r.get("PersistentKeepalive", parse_duration),
        endpoint=r.get("Endpoint", parse_addr_port, AddrPort()),
        allowed_ips=r.get("AllowedIPs", allowed_ips, AllowedIPs()),
    )


def decode_config(
    text: str,
    name: Optional[str] = None,
    policy: Optional[Mapping[str, FieldPolicy]] = None,
) -> Interface:
    """
    Décode un fichier .conf en Interface.

    `name` devient Interface.name (en général le nom du fichier sans
    extension, ex "wg0"). Lève StructuralError si le fichier ne contient
    pas exactement une section [Interface].
    """
    policy = resolve_policy(CONFIG_POLICY, policy)
    sections = list(iter_sections(text))

    interface_sections = [s for s in sections if s.name == INTERFACE_SECTION]
    if not interface_sections:
        raise StructuralError("missing [Interface] section")
    if len(interface_sections) > 1:
        raise StructuralError(
            "duplicate [Interface] section",
            line_number=interface_sections[1].line_number,
        )

    interface = _read_interface(interface_sections[0], policy, name)

    peers: List[Peer] = []
    for section in sections:
        if section.name == PEER_SECTION:
            peers.append(_read_peer(section, policy))
        elif section.name != INTERFACE_SECTION:
            logger.debug("line %d: unknown section [%s] ignored", section.line_number, section.name)
    interface.peers = peers

    return interface
