# src/wg_tools/wireguard.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

import qrcode

from .config import decode_config
from .errors import CommandError
from .models import Interface, Peer
from .policy import FieldPolicy
from .status import decode_status


# ---------- Sortie de l'outil wg ----------

@dataclass
class CommandOutput:
    """
    Résultat d'un appel à wg(8), fourni par l'appelant.
    Ex: CommandOutput("show", ["wg0"], stdout=..., stderr="", success=True)
    """

    subcommand: str
    args: List[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    success: bool = True

    def text(self) -> str:
        if not self.success:
            raise CommandError(self.stderr, subcommand=self.subcommand)
        return self.stdout


def interfaces_from_show(
    output: CommandOutput,
    policy: Optional[Mapping[str, FieldPolicy]] = None,
) -> List[Interface]:
    return decode_status(output.text(), policy=policy)


def interface_from_showconf(
    output: CommandOutput,
    policy: Optional[Mapping[str, FieldPolicy]] = None,
) -> Interface:
    """`wg showconf wg0` -> Interface(name="wg0", ...)"""
    name = output.args[0] if output.args else None
    return decode_config(output.text(), name=name, policy=policy)


# ---------- Rendu des configs ----------

def _render_interface_block(iface: Interface) -> List[str]:
    lines = ["[Interface]"]

    if iface.address is not None:
        lines.append(f"Address = {iface.address}")
    if iface.listening_port is not None:
        lines.append(f"ListenPort = {iface.listening_port}")
    if iface.private_key is not None:
        lines.append(f"PrivateKey = {iface.private_key}")
    if iface.dns is not None:
        lines.append(f"DNS = {iface.dns}")

    return lines


def _render_peer_block(peer: Peer) -> List[str]:
    lines = ["[Peer]"]

    if peer.public_key is not None:
        lines.append(f"PublicKey = {peer.public_key}")
    if peer.preshared_key is not None:
        lines.append(f"PresharedKey = {peer.preshared_key}")
    if peer.allowed_ips:
        lines.append(f"AllowedIPs = {peer.allowed_ips}")
    # 0.0.0.0:0 est la valeur par défaut, pas un endpoint réel
    if not peer.endpoint.is_unspecified():
        lines.append(f"Endpoint = {peer.endpoint}")
    if peer.persistent_keepalive is not None:
        lines.append(f"PersistentKeepalive = {peer.persistent_keepalive.seconds}")

    return lines


def render_conf(iface: Interface) -> str:
    """
    Texte [Interface] / [Peer] prêt pour `wg setconf` ou `wg syncconf`.
    Les champs absents ne sont pas écrits.
    """
    lines = _render_interface_block(iface)
    lines.append("")  # blank

    for p in iface.peers:
        lines.extend(_render_peer_block(p))
        lines.append("")  # blank

    return "\n".join(lines).strip() + "\n"


def render_qr(iface: Interface) -> qrcode.QRCode:
    """
    QR code de la configuration, à scanner depuis l'application mobile.
    Utiliser .make_image() pour obtenir l'image.
    """
    qr = qrcode.QRCode()
    qr.add_data(render_conf(iface))
    qr.make(fit=True)
    return qr
