# src/wg_tools/policy.py
"""
Politique d'échec par champ.

SOFT : la valeur illisible est journalisée et le champ garde sa valeur
par défaut. HARD : le décodage complet est interrompu par une
StructuralError chaînée à la FieldFormatError d'origine.
"""
from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, TypeVar

from .errors import FieldFormatError, StructuralError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FieldPolicy(Enum):
    SOFT = "soft"
    HARD = "hard"


# Clés de `wg show`
STATUS_POLICY: Mapping[str, FieldPolicy] = MappingProxyType({
    "listening port": FieldPolicy.HARD,
    "endpoint": FieldPolicy.HARD,
    # sans effet : une durée illisible vaut 0, parse_duration ne lève pas
    "latest handshake": FieldPolicy.HARD,
    "persistent keepalive": FieldPolicy.HARD,
    # HARD = mode strict : la première entrée illisible interrompt le décodage
    "allowed ips": FieldPolicy.SOFT,
    "transfer": FieldPolicy.SOFT,
})

# Clés des sections [Interface] et [Peer]
CONFIG_POLICY: Mapping[str, FieldPolicy] = MappingProxyType({
    "DNS": FieldPolicy.SOFT,
    "Address": FieldPolicy.SOFT,
    "PrivateKey": FieldPolicy.SOFT,
    "ListenPort": FieldPolicy.SOFT,
    "PublicKey": FieldPolicy.SOFT,
    "PresharedKey": FieldPolicy.SOFT,
    "PersistentKeepalive": FieldPolicy.SOFT,     # sans effet (durée)
    "Endpoint": FieldPolicy.SOFT,
    "AllowedIPs": FieldPolicy.SOFT,              # HARD = mode strict
})


def resolve_policy(
    base: Mapping[str, FieldPolicy],
    overrides: Optional[Mapping[str, FieldPolicy]] = None,
) -> Mapping[str, FieldPolicy]:
    if not overrides:
        return base
    unknown = set(overrides) - set(base)
    if unknown:
        raise ValueError(f"Unknown field(s) in policy: {', '.join(sorted(unknown))}")
    merged = dict(base)
    for name, value in overrides.items():
        # accepte aussi "soft" / "hard" ; toute autre valeur lève ValueError
        merged[name] = FieldPolicy(value)
    return MappingProxyType(merged)


def is_hard(policy: Mapping[str, FieldPolicy], field: str) -> bool:
    return policy.get(field, FieldPolicy.SOFT) is FieldPolicy.HARD


def apply_field(
    policy: Mapping[str, FieldPolicy],
    field: str,
    parser: Callable[[str], T],
    raw: str,
    default: Optional[T] = None,
    line_number: Optional[int] = None,
) -> Optional[T]:
    try:
        return parser(raw)
    except FieldFormatError as exc:
        if is_hard(policy, field):
            raise StructuralError(
                f"cannot parse {field!r}: {exc}",
                line_number=line_number,
                field_error=exc,
            ) from exc
        logger.debug("%s left at default: %s", field, exc)
        return default
