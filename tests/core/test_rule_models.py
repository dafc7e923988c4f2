"""
Tests for Core Domain Models (Rule).
"""
import pytest
from pydantic import ValidationError

from flowrules.core.domain.constants import MappingCondition
from flowrules.core.domain.rule import (
    EventMap,
    LinkMap,
    RangeMap,
    Rule,
    ShapeMap,
    TextMap,
    ThresholdSpec,
    create_default_rule,
)


def test_rule_defaults():
    """Test standard rule defaults."""
    rule = Rule()
    assert rule.id.startswith("rule-")
    assert rule.enabled is True
    assert rule.pattern == ".*"
    assert rule.aggregation == "current"
    assert rule.unit == "short"
    assert rule.decimals == 2
    assert rule.gradient is False
    assert rule.colors.critical == "#F2495C"


def test_rule_ids_are_unique():
    assert Rule().id != Rule().id


def test_rule_accepts_camel_case_keys():
    """Stored panel JSON uses camelCase keys."""
    rule = Rule.model_validate({
        "id": "r1",
        "metricType": "table",
        "gradientColors": ["#000000", "#ffffff"],
        "gradientThresholds": [0, 100],
        "shapeMaps": [{"pattern": "n1", "target": "strokeColor", "when": "critical"}],
        "linkMaps": [{"url": "http://x", "linkTarget": "_self"}],
    })
    assert rule.metric_type == "table"
    assert rule.gradient_thresholds == [0, 100]
    assert rule.shape_maps[0].target == "strokeColor"
    assert rule.shape_maps[0].when is MappingCondition.CRITICAL
    assert rule.link_maps[0].link_target == "_self"


def test_range_map_from_alias():
    m = RangeMap.model_validate({"from": 0, "to": 10, "text": "low"})
    assert m.from_ == 0
    assert m.model_dump(by_alias=True)["from"] == 0


def test_rule_validation():
    """Test validation logic."""
    with pytest.raises(ValidationError):
        ThresholdSpec(value=1, level=3)

    with pytest.raises(ValidationError):
        ThresholdSpec(value=1, level=1, comparator="=>")

    with pytest.raises(ValidationError):
        ShapeMap(when="sometimes")


def test_dump_uses_stored_key_names():
    data = Rule(id="r1", range_maps=[RangeMap(**{"from": 1, "to": 2, "text": "x"})]).model_dump(
        mode="json", by_alias=True
    )
    assert "shapeMaps" in data
    assert "gradientColors" in data
    assert data["rangeMaps"][0]["from"] == 1
    assert Rule.model_validate(data).range_maps[0].from_ == 1


def test_directives_order():
    rule = Rule(
        event_maps=[EventMap()],
        link_maps=[LinkMap()],
        text_maps=[TextMap()],
        shape_maps=[ShapeMap()],
    )
    kinds = [type(d) for d in rule.directives()]
    assert kinds == [ShapeMap, TextMap, LinkMap, EventMap]


def test_create_default_rule():
    rule = create_default_rule("Temperature")
    assert rule.name == "Temperature"
    assert [(t.value, t.level, t.comparator) for t in rule.thresholds] == [(50, 1, ">="), (80, 2, ">=")]
    assert len(rule.shape_maps) == 1
    assert rule.shape_maps[0].pattern == ".*"
    assert rule.shape_maps[0].when is MappingCondition.ALWAYS
