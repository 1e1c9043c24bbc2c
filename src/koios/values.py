"""Conversions for values the Koios API encodes as strings."""

from __future__ import annotations

from decimal import Decimal
from typing import Any


def amount(value: Any) -> Decimal | None:
    """Decode a lovelace or asset quantity.

    Quantities arrive as JSON strings or numbers; ``None`` passes through.
    Malformed values raise ``decimal.InvalidOperation``.
    """
    if value is None or value == "":
        return None
    return Decimal(str(value))


def plain(value: Any) -> Any:
    """Render a decoded value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    return value
