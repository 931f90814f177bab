"""
Tagged parameter values.

Each ParameterSpec carries a type tag. Text entered by the operator is checked
against the tag before a descriptor performs its own conversion, so malformed
input fails with a ConversionError without touching the network.

Tags
- string    free text (stripped)
- hex       0x followed by hex digits (addresses, hashes, raw data)
- quantity  non-negative integer, decimal or 0x hex
- number    non-negative decimal number, fractions allowed
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Literal

from .errors import ConversionError

ParamType = Literal["string", "hex", "quantity", "number"]

_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_INT_RE = re.compile(r"^[0-9]+$")
_NUMBER_RE = re.compile(r"^(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)$")


def _string(text: str) -> bool:
    return True


def _hex(text: str) -> bool:
    return bool(_HEX_RE.match(text))


def _quantity(text: str) -> bool:
    return bool(_INT_RE.match(text) or _HEX_RE.match(text))


def _number(text: str) -> bool:
    return bool(_NUMBER_RE.match(text))


_CHECKS: Dict[str, Callable[[str], bool]] = {
    "string": _string,
    "hex": _hex,
    "quantity": _quantity,
    "number": _number,
}

_EXPECTED: Dict[str, str] = {
    "string": "text",
    "hex": "a 0x-prefixed hex value",
    "quantity": "a non-negative integer (decimal or 0x hex)",
    "number": "a non-negative number",
}


def coerce_param(name: str, type_tag: str, text: str) -> str:
    """
    Validate operator text against a parameter's type tag.

    Returns the stripped text. Raises ConversionError naming the parameter when
    the text does not match the tag, or when the tag itself is unknown.
    """
    check = _CHECKS.get(type_tag)
    if check is None:
        raise ConversionError(f"{name}: unknown parameter type '{type_tag}'")
    value = (text or "").strip()
    if not check(value):
        shown = value if value else "<empty>"
        raise ConversionError(f"{name}: expected {_EXPECTED[type_tag]}, got '{shown}'")
    return value


__all__ = ["ParamType", "coerce_param"]
