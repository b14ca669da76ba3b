"""
Exact conversion between decimal amount strings and integer minor units.

All monetary arithmetic in the audit engine happens on Python ints. Decimal
is only used on the way out, for reporting.
"""

import re
from decimal import Decimal
from typing import Any, Union

from .exceptions import MalformedDecimal

DEFAULT_DECIMALS = 18

_DECIMAL_RE = re.compile(r"^[+-]?([0-9]*)(?:\.([0-9]*))?$")

Amount = Union[str, int, float, Decimal, None]


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        raise MalformedDecimal(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        # JSON numbers may arrive as floats; render without exponent
        return format(Decimal(str(value)), "f")
    if isinstance(value, str):
        return value.strip()
    raise MalformedDecimal(value)


def normalize(value: Amount, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Convert a decimal string into an integer minor-unit string.

    A value with a fractional part is scaled by ``decimals``: excess fraction
    digits are truncated, short fractions are right-padded with zeros. A value
    without a fractional separator is taken to be minor units already.

    Args:
        value: Decimal amount, e.g. "1.5" or "1000"
        decimals: Unit scale of the token

    Returns:
        Integer minor units as a string ("0" for empty input)

    Raises:
        MalformedDecimal: If value is not a plain decimal number
        ValueError: If decimals is negative

    Examples:
        >>> normalize("1.23456789", 4)
        '12345'
        >>> normalize("2.5", 6)
        '2500000'
        >>> normalize("1000", 18)
        '1000'
    """
    return str(to_minor_units(value, decimals))


def to_minor_units(value: Amount, decimals: int = DEFAULT_DECIMALS) -> int:
    """Same as normalize() but returns the int."""
    if decimals is None:
        decimals = DEFAULT_DECIMALS
    decimals = int(decimals)
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative: {decimals}")

    if value is None:
        return 0
    text = _as_text(value)
    if text == "":
        return 0

    match = _DECIMAL_RE.match(text)
    if not match or not (match.group(1) or match.group(2)):
        raise MalformedDecimal(value)

    if "." not in text:
        return int(text)

    integer, fraction = text.split(".", 1)
    fraction = fraction[:decimals].ljust(decimals, "0")
    digits = integer + fraction
    if digits in ("", "+", "-"):
        return 0
    return int(digits)


def from_minor_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    """Scale integer minor units back to a Decimal in natural units."""
    return Decimal(int(amount)).scaleb(-int(decimals))


def gas_price_to_minor_units(
    price_per_unit: Amount, decimals: int = DEFAULT_DECIMALS
) -> int:
    """
    Convert a per-gas-unit price in natural units (e.g. 0.000000032 ETH)
    into minor units per gas unit (e.g. 32000000000 wei).
    """
    text = _as_text(price_per_unit)
    if "." not in text:
        # A whole-number price is still in natural units here
        text = text + "."
    return to_minor_units(text, decimals)


def gwei_to_price_per_unit(gwei: Amount) -> Decimal:
    """32 gwei -> Decimal('0.000000032')"""
    return Decimal(_as_text(gwei)).scaleb(-9)
