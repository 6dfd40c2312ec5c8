# src/wg_tools/values.py
"""
Parseurs des valeurs atomiques communes à `wg show` et aux fichiers .conf.

Chaque fonction est pure : elle retourne une valeur typée ou lève une
FieldFormatError qui nomme le champ et la valeur brute. parse_duration ne
lève jamais ; parse_allowed_ips et parse_transfer ne lèvent qu'en mode
strict.
"""
from __future__ import annotations

import ipaddress
import logging
import re
from decimal import Decimal
from typing import Tuple

from .errors import (
    AddressFormatError,
    ByteSizeFormatError,
    CidrFormatError,
    KeyFormatError,
    PortFormatError,
)
from .models import AddrPort, AllowedIPs, IPAddress, IPNet, TimeDuration, Transfer

logger = logging.getLogger(__name__)

MAX_PORT = 0xFFFF
MAX_WIDE_PORT = 2**64 - 1

# "day" vaut 60 * 24 secondes : comportement historique conservé tel quel.
DURATION_UNITS: Tuple[Tuple[str, int], ...] = (
    ("second", 1),
    ("minute", 60),
    ("day", 60 * 24),
)

BYTE_UNITS = {
    "B": 1,
    "KiB": 1024,
    "MiB": 1024**2,
    "GiB": 1024**3,
    "TiB": 1024**4,
    "PiB": 1024**5,
    "EiB": 1024**6,
    "kB": 1000,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
    "PB": 1000**5,
}

_UINT_RE = re.compile(r"\d+", re.ASCII)
_BYTE_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([A-Za-z]+)", re.ASCII)


# ---------- Entiers ----------

def _parse_uint(text: str, maximum: int) -> int:
    text = text.strip()
    if not _UINT_RE.fullmatch(text):
        raise PortFormatError(text)
    value = int(text)
    if value > maximum:
        raise PortFormatError(text)
    return value


def parse_port(text: str) -> int:
    """Port UDP sur 16 bits (ListenPort, listening port)."""
    return _parse_uint(text, MAX_PORT)


# ---------- Adresses ----------

def parse_ip(text: str) -> IPAddress:
    try:
        return ipaddress.ip_address(text.strip())
    except ValueError:
        raise AddressFormatError(text) from None


def parse_cidr(text: str) -> IPNet:
    """
    "10.13.13.2/24" -> IPv4Interface. L'adresse hôte est conservée,
    le préfixe est obligatoire.
    """
    text = text.strip()
    if "/" not in text:
        raise CidrFormatError(text)
    try:
        return ipaddress.ip_interface(text)
    except ValueError:
        raise CidrFormatError(text) from None


def parse_addr_port(text: str) -> AddrPort:
    parts = text.strip().split(":")
    if len(parts) != 2:
        raise AddressFormatError(text, field="endpoint")

    addr, port = parts
    try:
        return AddrPort(addr=parse_ip(addr), port=_parse_uint(port, MAX_WIDE_PORT))
    except AddressFormatError:
        raise AddressFormatError(addr, field="endpoint address") from None
    except PortFormatError:
        raise PortFormatError(port, field="endpoint port") from None


def parse_allowed_ips(text: str, strict: bool = False) -> AllowedIPs:
    """
    "10.0.0.0/24, 10.0.1.0/24" -> AllowedIPs. Les entrées illisibles sont
    ignorées, sauf en mode strict où la première lève CidrFormatError.
    """
    networks = []
    for token in text.split(","):
        try:
            networks.append(parse_cidr(token))
        except CidrFormatError as exc:
            if strict:
                raise
            logger.debug("dropping allowed ip %r: %s", token, exc)
    return AllowedIPs(networks)


# ---------- Clés ----------

def parse_key(text: str) -> str:
    key = text.strip()
    if not key:
        raise KeyFormatError(text)
    return key


# ---------- Durées ----------

def parse_duration(text: str) -> TimeDuration:
    """
    "25" -> 25 s, "1 minute, 31 seconds ago" -> 91 s,
    "every 25 seconds" -> 25 s. Les mots inconnus sont ignorés ;
    une entrée illisible donne une durée nulle.
    """
    text = text.strip()
    if _UINT_RE.fullmatch(text):
        return TimeDuration(int(text))

    text = text.strip(",.")
    if text.endswith("ago"):
        text = text[: -len("ago")].rstrip(" ,.")

    total = 0
    pending = 0
    for token in text.split():
        if _UINT_RE.fullmatch(token):
            pending += int(token)
            continue
        for unit, factor in DURATION_UNITS:
            if unit in token:
                total += pending * factor
                pending = 0
                break

    return TimeDuration(total)


# ---------- Tailles ----------

def parse_byte_size(text: str) -> int:
    """"1.18 MiB" -> 1237319 (octets, tronqué)."""
    match = _BYTE_SIZE_RE.fullmatch(text.strip())
    if match is None or match.group(2) not in BYTE_UNITS:
        raise ByteSizeFormatError(text)
    magnitude, unit = match.groups()
    return int(Decimal(magnitude) * BYTE_UNITS[unit])


def parse_transfer(text: str, strict: bool = False) -> Transfer:
    """
    "1.18 MiB received, 3.89 MiB sent" -> Transfer(received=..., sent=...).
    Un compteur illisible vaut 0, sauf en mode strict (ByteSizeFormatError).
    """
    received = sent = None
    for segment in text.split(", "):
        segment = segment.strip()
        if received is None and segment.endswith(" received"):
            received = _byte_size(segment[: -len(" received")], strict)
        elif sent is None and segment.endswith(" sent"):
            sent = _byte_size(segment[: -len(" sent")], strict)
    return Transfer(received=received or 0, sent=sent or 0)


def _byte_size(text: str, strict: bool) -> int:
    try:
        return parse_byte_size(text)
    except ByteSizeFormatError as exc:
        if strict:
            raise
        logger.debug("transfer counter defaulted: %s", exc)
        return 0
