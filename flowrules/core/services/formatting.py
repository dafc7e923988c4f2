"""
Value Formatting - Unit/decimal formatting plus value and range maps.
"""

import math
from typing import Sequence

from flowrules.core.domain.rule import RangeMap, ValueMap

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_value(value: float | str | None, unit: str | None = None, decimals: int = 2) -> str:
    """Format a value for display using the rule's unit and decimals."""
    if value is None:
        return "N/A"
    if isinstance(value, str):
        return value
    if math.isnan(value):
        return "NaN"
    return format_value_with_unit(value, unit, decimals)


def format_value_with_unit(value: float, unit: str | None = None, decimals: int = 2) -> str:
    formatted = f"{value:.{decimals}f}"
    if not unit or unit in ("none", "short"):
        return _format_short(value, decimals)
    if unit in ("percent", "percentunit"):
        return f"{formatted}%"
    if unit == "bytes":
        return _format_bytes(value)
    if unit in ("ms", "s"):
        return f"{formatted}{unit}"
    return f"{formatted} {unit}"


def plain_number(value: float | str) -> str:
    """String form of a value with integral floats written without ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def apply_value_maps(value: float | str, maps: Sequence[ValueMap]) -> str | None:
    """Text of the first enabled value map equal to the value, if any."""
    key = plain_number(value)
    for m in maps:
        if m.enabled and m.value == key:
            return m.text
    return None


def apply_range_maps(value: float, maps: Sequence[RangeMap]) -> str | None:
    """Text of the first enabled range map containing the value (both ends inclusive)."""
    for m in maps:
        if m.enabled and m.from_ <= value <= m.to:
            return m.text
    return None


def _format_bytes(value: float) -> str:
    i = 0
    while value >= 1024 and i < len(_BYTE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f} {_BYTE_UNITS[i]}"


def _format_short(value: float, decimals: int = 2) -> str:
    magnitude = abs(value)
    if magnitude >= 1e9:
        return f"{value / 1e9:.{decimals}f}B"
    if magnitude >= 1e6:
        return f"{value / 1e6:.{decimals}f}M"
    if magnitude >= 1e3:
        return f"{value / 1e3:.{decimals}f}K"
    return f"{value:.{decimals}f}"
