"""Conversion between human-readable token amounts and integer base units."""

from __future__ import annotations

import enum
import re
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Callable

from warpbridge.core.errors import ConversionError

# uint256 values have 78 digits; leave room for the fractional part.
_PRECISION = 160

_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

NATIVE_DECIMALS = 18


class Unit(str, enum.Enum):
    """Unit an amount string is expressed in."""

    TOKEN = "token"
    BASE = "base"


def to_base_units(amount: str, decimals: int) -> int:
    """Scale a decimal string by ``10**decimals`` without floating point."""
    text = str(amount).strip()
    if not _DECIMAL_RE.match(text):
        raise ConversionError(f"Invalid decimal amount: {amount!r}")
    if decimals < 0:
        raise ConversionError(f"Invalid decimals value: {decimals}")

    fraction = text.partition(".")[2]
    if len(fraction.rstrip("0")) > decimals:
        raise ConversionError(f"Amount {text} has more than {decimals} decimal places")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ctx.traps[Inexact] = True
        try:
            scaled = Decimal(text).scaleb(decimals)
        except Inexact as exc:
            raise ConversionError(f"Amount {text} cannot be scaled exactly") from exc
        return int(scaled)


def from_base_units(value: int, decimals: int) -> str:
    """Render base units as a full-precision decimal string."""
    if decimals < 0:
        raise ConversionError(f"Invalid decimals value: {decimals}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = Decimal(int(value)).scaleb(-decimals).normalize()
        return format(scaled, "f")


def parse_base_units(amount: str) -> int:
    """Parse an amount already expressed in base units."""
    text = str(amount).strip()
    if not _INTEGER_RE.match(text):
        raise ConversionError(f"Invalid base unit amount: {amount!r}")
    return int(text)


def amount_to_base_units(amount: str, unit: Unit, decimals_fn: Callable[[], int]) -> int:
    """Convert ``amount`` to base units, reading decimals only for token units."""
    if Unit(unit) is Unit.BASE:
        return parse_base_units(amount)
    return to_base_units(amount, decimals_fn())


def parse_decimal(amount: str) -> Decimal:
    """Parse a decimal string, raising ``ConversionError`` when it is not numeric."""
    try:
        return Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ConversionError(f"Invalid decimal amount: {amount!r}") from exc


def format_ether(wei: int) -> str:
    return from_base_units(wei, NATIVE_DECIMALS)


__all__ = [
    "NATIVE_DECIMALS",
    "Unit",
    "amount_to_base_units",
    "format_ether",
    "from_base_units",
    "parse_base_units",
    "parse_decimal",
    "to_base_units",
]
