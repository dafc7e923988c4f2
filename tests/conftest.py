"""
Shared fixtures for flowrules tests.
"""
import pandas as pd
import pytest

from flowrules.adapters.surface.memory import InMemorySurface
from flowrules.core.domain.rule import Rule, ShapeMap, ThresholdColors, ThresholdSpec


@pytest.fixture
def colors():
    return ThresholdColors()


@pytest.fixture
def cpu_frame():
    """Wide frame with a time column and one cpu series ending at 90."""
    frame = pd.DataFrame({
        "time": pd.date_range("2024-01-01", periods=3, freq="1min"),
        "cpu": [10.0, 55.0, 90.0],
    })
    frame.attrs["ref_id"] = "A"
    return frame


@pytest.fixture
def cpu_rule():
    return Rule(
        id="rule-cpu",
        name="CPU",
        alias="cpu",
        thresholds=[
            ThresholdSpec(value=50, level=1, comparator=">="),
            ThresholdSpec(value=80, level=2, comparator=">="),
        ],
        shape_maps=[ShapeMap(pattern=".*", target="fillColor", when="always")],
    )


@pytest.fixture
def surface():
    return InMemorySurface(
        labels={"n1": "cpu", "n2": "memory", "n3": "Disk"},
        styles={"n1": "rounded=1;fillColor=#ffffff;", "n2": "ellipse;"},
    )
