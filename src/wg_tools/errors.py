# src/wg_tools/errors.py
from __future__ import annotations

from typing import Optional


class WgToolsError(Exception):
    """Racine de toutes les erreurs de wg_tools."""


# ---------- Erreurs de champ ----------

class FieldFormatError(WgToolsError, ValueError):
    """Une valeur ne respecte pas la grammaire de son champ."""

    kind = "field"

    def __init__(self, raw_value: str, field: Optional[str] = None):
        self.raw_value = raw_value
        self.field = field or self.kind
        super().__init__(f"invalid {self.field}: {raw_value!r}")


class AddressFormatError(FieldFormatError):
    kind = "address"


class PortFormatError(FieldFormatError):
    kind = "port"


class DurationFormatError(FieldFormatError):
    kind = "duration"


class ByteSizeFormatError(FieldFormatError):
    kind = "byte size"


class CidrFormatError(FieldFormatError):
    kind = "cidr"


class KeyFormatError(FieldFormatError):
    kind = "key"


# ---------- Erreurs de structure ----------

class StructuralError(WgToolsError):
    """
    Le texte ne forme pas un enregistrement valide (section [Interface]
    absente, champ bloquant illisible, ...).
    """

    def __init__(
        self,
        reason: str,
        line_number: Optional[int] = None,
        field_error: Optional[FieldFormatError] = None,
    ):
        self.reason = reason
        self.line_number = line_number
        self.field_error = field_error
        if line_number is not None:
            reason = f"line {line_number}: {reason}"
        super().__init__(reason)


# ---------- Collaborateur externe ----------

class CommandError(WgToolsError, IOError):
    """L'outil wg a échoué ; stderr est transmis tel quel."""

    def __init__(self, stderr: str, subcommand: Optional[str] = None):
        self.stderr = stderr
        self.subcommand = subcommand
        super().__init__(stderr)
