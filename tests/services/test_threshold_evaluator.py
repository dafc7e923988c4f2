"""
Tests for the Threshold Evaluator.
"""
import pytest

from flowrules.core.domain.rule import ThresholdColors, ThresholdSpec
from flowrules.core.services.threshold_evaluator import (
    RGB,
    ColorParseError,
    compare_values,
    evaluate_gradient,
    evaluate_threshold,
    get_color_for_level,
    get_level_name,
    hex_to_rgb,
    interpolate_color,
    invert_level,
    rgb_to_hex,
)

WARN_CRIT = [
    ThresholdSpec(value=50, level=1, comparator=">="),
    ThresholdSpec(value=80, level=2, comparator=">="),
]


@pytest.mark.parametrize("value,level", [(10, 0), (50, 1), (55, 1), (80, 2), (90, 2)])
def test_discrete_thresholds(value, level, colors):
    result = evaluate_threshold(value, WARN_CRIT, colors)
    assert result.level == level
    assert result.color == get_color_for_level(level, colors)


def test_critical_checked_before_warning(colors):
    """Input order does not matter; the higher severity wins."""
    result = evaluate_threshold(90, list(reversed(WARN_CRIT)), colors)
    assert result.level == 2
    assert result.color == colors.critical


@pytest.mark.parametrize("value,level", [(10, 2), (55, 1), (90, 0)])
def test_inverted_thresholds(value, level, colors):
    assert evaluate_threshold(value, WARN_CRIT, colors, invert=True).level == level


def test_no_thresholds_is_ok(colors):
    assert evaluate_threshold(1000, [], colors).level == 0
    assert evaluate_threshold(1000, [], colors, invert=True).level == 0


def test_string_thresholds(colors):
    down = [ThresholdSpec(value="down", level=2, comparator="==")]
    assert evaluate_threshold("down", down, colors).level == 2
    assert evaluate_threshold("up", down, colors).level == 0


def test_custom_colors():
    colors = ThresholdColors(ok="green", warning="orange", critical="red")
    assert evaluate_threshold(55, WARN_CRIT, colors).color == "orange"


def test_compare_values():
    assert compare_values(10, 5, ">")
    assert compare_values("10", 5, ">")
    assert compare_values(5, "5.0", "==")
    assert compare_values("up", "up", "==")
    assert compare_values("up", "down", "!=")
    assert not compare_values("up", "down", ">")
    assert not compare_values("up", 5, "<=")
    assert not compare_values(5, 5, "~")


GRADIENT = ["#000000", "#ffffff"]


def test_gradient_midpoint():
    result = evaluate_gradient(50, [0, 100], GRADIENT)
    assert result.color == "#808080"
    assert result.level == 1


@pytest.mark.parametrize("value", [0, -5])
def test_gradient_at_or_below_minimum(value):
    assert evaluate_gradient(value, [0, 100], GRADIENT) == evaluate_gradient(0, [100, 0], GRADIENT)
    result = evaluate_gradient(value, [0, 100], GRADIENT)
    assert (result.level, result.color) == (0, "#000000")


@pytest.mark.parametrize("value", [100, 250])
def test_gradient_at_or_above_maximum(value):
    result = evaluate_gradient(value, [0, 100], GRADIENT)
    assert (result.level, result.color) == (2, "#ffffff")


def test_gradient_inverted_boundaries():
    low = evaluate_gradient(0, [0, 100], GRADIENT, invert=True)
    high = evaluate_gradient(100, [0, 100], GRADIENT, invert=True)
    assert (low.level, low.color) == (0, "#ffffff")
    assert (high.level, high.color) == (2, "#000000")


def test_gradient_level_follows_position_across_span():
    """
    The level comes from the position across all breakpoints, not from the
    segment used for the color.
    """
    thresholds = [0, 10, 100]
    colors = ["#00ff00", "#ffff00", "#ff0000"]

    # second segment, but only 20% across the span
    assert evaluate_gradient(20, thresholds, colors).level == 0
    assert evaluate_gradient(40, thresholds, colors).level == 1
    assert evaluate_gradient(70, thresholds, colors).level == 2


def test_gradient_degenerate_inputs():
    assert evaluate_gradient(5, [], GRADIENT).color == "#000000"
    result = evaluate_gradient(5, [0, 10], [])
    assert result.level == 0
    assert result.color == ThresholdColors().ok


def test_gradient_with_fewer_colors_than_breakpoints():
    result = evaluate_gradient(75, [0, 50, 100], ["#000000", "#ffffff"])
    assert result.color == "#ffffff"


def test_interpolate_unparseable_colors_cut_over():
    assert interpolate_color("green", "red", 0.49) == "green"
    assert interpolate_color("green", "red", 0.5) == "red"


def test_interpolate_short_hex():
    assert interpolate_color("#000", "#fff", 1) == "#ffffff"


def test_hex_to_rgb():
    assert hex_to_rgb("#ff8000") == RGB(255, 128, 0)
    assert hex_to_rgb("f80") == RGB(255, 136, 0)
    for bad in ("", "#12", "#gggggg", "rgb(1,2,3)"):
        with pytest.raises(ColorParseError):
            hex_to_rgb(bad)


def test_rgb_to_hex_clamps():
    assert rgb_to_hex(RGB(300, -4, 15)) == "#ff000f"


def test_levels():
    assert invert_level(0) == 2
    assert invert_level(1) == 1
    assert invert_level(2) == 0
    assert get_color_for_level(7) == ThresholdColors().ok
    assert get_level_name(2) == "Critical"
    assert get_level_name(9) == "Unknown"
