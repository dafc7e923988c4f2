"""
Threshold Evaluator - Maps a value to a severity level and a color.

Two modes:
- Discrete thresholds: the highest-severity threshold that holds wins.
- Gradient: the color is interpolated between the colors bounding the
  value's segment; the level comes from the value's position across the
  whole threshold span.
"""

import logging
import math
import string
from dataclasses import dataclass
from typing import NamedTuple, Sequence

from flowrules.core.domain.constants import DEFAULT_COLORS, LEVEL_CRITICAL, LEVEL_OK, LEVEL_WARNING
from flowrules.core.domain.rule import ThresholdColors, ThresholdSpec

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class ThresholdResult:
    level: int
    color: str


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class ColorParseError(ValueError):
    """Raised when a color string is not 3- or 6-digit hex."""


def evaluate_threshold(
    value: float | str,
    thresholds: Sequence[ThresholdSpec],
    colors: ThresholdColors,
    invert: bool = False,
) -> ThresholdResult:
    """
    Evaluate a value against discrete thresholds.

    Thresholds are checked from critical down to ok. When nothing matches the
    result is ok, or critical when ``invert`` is set.
    """
    if not thresholds:
        return ThresholdResult(LEVEL_OK, colors.ok)

    for threshold in sorted(thresholds, key=lambda t: t.level, reverse=True):
        if compare_values(value, threshold.value, threshold.comparator):
            level = invert_level(threshold.level) if invert else threshold.level
            return ThresholdResult(level, get_color_for_level(level, colors))

    level = LEVEL_CRITICAL if invert else LEVEL_OK
    return ThresholdResult(level, get_color_for_level(level, colors))


def evaluate_gradient(
    value: float,
    thresholds: Sequence[float],
    colors: Sequence[str],
    invert: bool = False,
) -> ThresholdResult:
    """
    Evaluate a value against gradient breakpoints.

    Args:
        value: Value to place on the gradient
        thresholds: Breakpoints, any order
        colors: Hex colors; ideally one per breakpoint
        invert: Run the palette from last to first

    Returns:
        Interpolated color and a position-derived level
    """
    if not thresholds or not colors:
        return ThresholdResult(LEVEL_OK, colors[0] if colors else DEFAULT_COLORS["ok"])

    ordered = sorted(thresholds)
    last = len(colors) - 1

    if value <= ordered[0]:
        return ThresholdResult(LEVEL_OK, colors[last] if invert else colors[0])

    if value >= ordered[-1]:
        return ThresholdResult(LEVEL_CRITICAL, colors[0] if invert else colors[last])

    for i in range(len(ordered) - 1):
        lo, hi = ordered[i], ordered[i + 1]
        if not lo <= value <= hi:
            continue

        width = hi - lo
        progress = (value - lo) / width if width > 0 else 0

        color_idx = last - i if invert else i
        next_idx = last - 1 - i if invert else i + 1
        c1 = colors[_clamp(color_idx, 0, last)]
        c2 = colors[_clamp(next_idx, 0, last)]
        color = interpolate_color(c1, c2, 1 - progress if invert else progress)

        # Level follows the position across the whole span, not the segment
        position = (value - ordered[0]) / (ordered[-1] - ordered[0])
        if position < 0.33:
            level = LEVEL_OK
        elif position < 0.66:
            level = LEVEL_WARNING
        else:
            level = LEVEL_CRITICAL
        return ThresholdResult(level, color)

    return ThresholdResult(LEVEL_OK, colors[0])


def interpolate_color(color1: str, color2: str, t: float) -> str:
    """Linear RGB interpolation; unparseable colors switch over at t = 0.5."""
    try:
        rgb1 = hex_to_rgb(color1)
        rgb2 = hex_to_rgb(color2)
    except ColorParseError as e:
        logger.debug(f"Falling back to hard cutover: {e}")
        return color1 if t < 0.5 else color2

    return rgb_to_hex(RGB(
        _round_half_up(rgb1.r + (rgb2.r - rgb1.r) * t),
        _round_half_up(rgb1.g + (rgb2.g - rgb1.g) * t),
        _round_half_up(rgb1.b + (rgb2.b - rgb1.b) * t),
    ))


def hex_to_rgb(color: str) -> RGB:
    """
    Parse ``#rgb`` / ``#rrggbb`` (``#`` optional).

    Raises:
        ColorParseError: if the string is not 3- or 6-digit hex
    """
    clean = (color or "").replace("#", "")
    if len(clean) == 3:
        clean = "".join(ch * 2 for ch in clean)
    if len(clean) != 6 or not _HEX_DIGITS.issuperset(clean):
        raise ColorParseError(f"Unsupported color '{color}'")
    return RGB(int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16))


def rgb_to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{_clamp(channel, 0, 255):02x}" for channel in rgb)


def compare_values(a: float | str, b: float | str, operator: str) -> bool:
    """
    Compare two operands.

    Numeric when both parse as numbers; otherwise only ``==``/``!=`` are
    defined (as string comparisons) and every other operator is False.
    """
    num_a, num_b = _to_number(a), _to_number(b)

    if num_a is not None and num_b is not None:
        if operator == ">":
            return num_a > num_b
        if operator == "<":
            return num_a < num_b
        if operator == ">=":
            return num_a >= num_b
        if operator == "<=":
            return num_a <= num_b
        if operator == "==":
            return num_a == num_b
        if operator == "!=":
            return num_a != num_b
        return False

    if operator == "==":
        return str(a) == str(b)
    if operator == "!=":
        return str(a) != str(b)
    return False


def get_color_for_level(level: int, colors: ThresholdColors | None = None) -> str:
    colors = colors or ThresholdColors()
    if level == LEVEL_WARNING:
        return colors.warning
    if level == LEVEL_CRITICAL:
        return colors.critical
    return colors.ok


def invert_level(level: int) -> int:
    """Swap ok and critical; warning stays."""
    if level == LEVEL_OK:
        return LEVEL_CRITICAL
    if level == LEVEL_CRITICAL:
        return LEVEL_OK
    return level


def get_level_name(level: int) -> str:
    return {LEVEL_OK: "OK", LEVEL_WARNING: "Warning", LEVEL_CRITICAL: "Critical"}.get(level, "Unknown")


def _to_number(value) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if value != value else float(value)
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return None if number != number else number


def _clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(n, hi))


def _round_half_up(x: float) -> int:
    # halves round up, not to even
    return math.floor(x + 0.5)
