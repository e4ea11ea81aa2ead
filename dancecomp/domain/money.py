"""
Money helpers.

Amounts are Decimals quantized to the currency's minor units. Floats are
accepted on input only via their string form so 0.1 stays 0.1.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")

DEFAULT_SYMBOLS: dict[str, str] = {"ZAR": "R", "USD": "$", "EUR": "€", "GBP": "£"}


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a loosely typed amount to Decimal; None reads as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a valid amount: {value!r}") from e


def quantum(minor_units: int = 2) -> Decimal:
    return Decimal(1).scaleb(-minor_units)


def quantize(amount: Decimal, minor_units: int = 2) -> Decimal:
    """Round half-up to the currency's minor units."""
    return to_decimal(amount).quantize(quantum(minor_units), rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal, minor_units: int = 2) -> int:
    """Convert an exact amount to an integer count of minor units (floor)."""
    scaled = to_decimal(amount).scaleb(minor_units)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def from_minor_units(units: int, minor_units: int = 2) -> Decimal:
    return Decimal(units).scaleb(-minor_units).quantize(quantum(minor_units))


def is_exact(amount: Decimal, minor_units: int = 2) -> bool:
    """True if amount has no precision below the minor unit."""
    return to_decimal(amount) == quantize(amount, minor_units)


def format_amount(
    amount: Decimal,
    currency: str,
    symbols: Mapping[str, str] | None = None,
    minor_units: int = 2,
) -> str:
    symbol = (symbols or DEFAULT_SYMBOLS).get(currency)
    value = f"{quantize(amount, minor_units):.{minor_units}f}"
    if symbol:
        return f"{symbol}{value}"
    return f"{currency} {value}"
