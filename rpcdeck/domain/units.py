"""
Quantity conversions used by the method catalog.

Ethereum JSON-RPC encodes quantities as 0x-prefixed hex strings and balances
in wei (1 ETH = 10**18 wei). All arithmetic here is exact (int / Decimal);
malformed input raises ConversionError.
"""

from __future__ import annotations

import string
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

from .errors import ConversionError

WEI_PER_ETH = 10 ** 18


def to_hex(num: Union[int, str]) -> str:
    """Convert a non-negative decimal integer (or its text) to a 0x-prefixed hex string."""
    if isinstance(num, str):
        text = num.strip()
        if not (text.isascii() and text.isdigit()):
            raise ConversionError(f"Invalid decimal integer: '{num}'")
        value = int(text)
    else:
        value = int(num)
    if value < 0:
        raise ConversionError(f"Negative values cannot be hex-encoded: {value}")
    return hex(value)


def from_hex(text: str) -> int:
    """Convert a hex string (with or without 0x prefix) to an int."""
    raw = (text or "").strip()
    digits = raw[2:] if raw[:2].lower() == "0x" else raw
    if not digits or any(c not in string.hexdigits for c in digits):
        raise ConversionError(f"Invalid hex value: '{text}'")
    return int(digits, 16)


def to_quantity(text: str) -> str:
    """Normalize a decimal or 0x-hex quantity to the hex form the node expects."""
    raw = (text or "").strip()
    if raw[:2].lower() == "0x":
        return hex(from_hex(raw))
    return to_hex(raw)


def _to_decimal(text: str) -> Decimal:
    try:
        value = Decimal((text or "").strip())
    except InvalidOperation:
        raise ConversionError(f"Invalid number: '{text}'") from None
    if not value.is_finite():
        raise ConversionError(f"Invalid number: '{text}'")
    return value


def eth_to_wei_hex(eth: str) -> str:
    """Convert an ETH amount (decimal text) to wei as hex; sub-wei fractions are dropped."""
    value = _to_decimal(eth)
    if value < 0:
        raise ConversionError(f"Balance cannot be negative: '{eth}'")
    with localcontext() as ctx:
        ctx.prec = 100
        wei = int((value * WEI_PER_ETH).to_integral_value(rounding=ROUND_DOWN))
    return hex(wei)


def wei_hex_to_eth(wei_hex: str, places: int = 6) -> str:
    """Convert a wei hex quantity to an ETH decimal string with a fixed number of places."""
    whole, frac = divmod(from_hex(wei_hex), WEI_PER_ETH)
    places = min(places, 18)
    if places <= 0:
        return str(whole)
    return f"{whole}.{frac:018d}"[: len(str(whole)) + 1 + places]


def format_number(num: int) -> str:
    """Format an integer with thousands separators."""
    return f"{num:,}"


__all__ = [
    "WEI_PER_ETH",
    "to_hex",
    "from_hex",
    "to_quantity",
    "eth_to_wei_hex",
    "wei_hex_to_eth",
    "format_number",
]
