"""
Tests for the Rule Evaluator.
"""
import pytest

from flowrules.core.domain.metric import ProcessedMetric
from flowrules.core.domain.rule import RangeMap, Rule, ThresholdSpec, ValueMap
from flowrules.core.services.rule_evaluator import evaluate_all_rules, evaluate_rule


@pytest.fixture
def metrics():
    return [
        ProcessedMetric(name="cpu", source_id="A", values=[10.0, 55.0, 90.0], column_name="cpu"),
        ProcessedMetric(name="cpu-2", source_id="A", values=[20.0, 30.0], column_name="cpu-2"),
        ProcessedMetric(name="status", source_id="B", values=[1.0], column_name="status"),
    ]


def test_evaluate_rule(cpu_rule, metrics, colors):
    result = evaluate_rule(cpu_rule, metrics)

    assert result.rule_id == "rule-cpu"
    assert result.rule_name == "CPU"
    assert result.value == 90.0
    assert result.level == 2
    assert result.color == colors.critical
    assert result.formatted_value == "90.00"
    assert result.matched is True
    assert result.metric_name == "cpu"


def test_values_of_all_matched_metrics_are_pooled(metrics):
    rule = Rule(alias="cpu*", aggregation="max")
    result = evaluate_rule(rule, metrics)
    assert result.value == 90.0
    assert result.metric_name == "cpu"

    rule = Rule(alias="cpu*", aggregation="count")
    assert evaluate_rule(rule, metrics).value == 5


def test_disabled_or_unmatched_rule_has_no_result(cpu_rule, metrics):
    assert evaluate_rule(cpu_rule.model_copy(update={"enabled": False}), metrics) is None
    assert evaluate_rule(Rule(alias="memory"), metrics) is None
    assert evaluate_rule(Rule(alias="cpu"), []) is None


def test_pattern_used_when_alias_empty(metrics):
    rule = Rule(pattern="status")
    assert evaluate_rule(rule, metrics).metric_name == "status"


def test_column_filter(metrics):
    rule = Rule(alias="cpu", column="cpu-2", aggregation="avg")
    assert evaluate_rule(rule, metrics).value == 25.0


def test_host_variables_in_alias(metrics):
    rule = Rule(alias="$metric")
    result = evaluate_rule(rule, metrics, resolve_host_variable=lambda s: s.replace("$metric", "status"))
    assert result.metric_name == "status"


def test_gradient_mode(metrics):
    rule = Rule(
        alias="cpu",
        gradient=True,
        gradient_thresholds=[0, 180],
        gradient_colors=["#000000", "#ffffff"],
        thresholds=[ThresholdSpec(value=0, level=2, comparator=">=")],
    )
    result = evaluate_rule(rule, metrics)
    assert result.color == "#808080"
    assert result.level == 1


def test_gradient_without_colors_uses_thresholds(metrics, colors):
    rule = Rule(alias="cpu", gradient=True, thresholds=[ThresholdSpec(value=0, level=2, comparator=">=")])
    assert evaluate_rule(rule, metrics).color == colors.critical


def test_value_map_wins_over_range_map(metrics):
    rule = Rule(
        alias="status",
        value_maps=[ValueMap(value="1", text="UP")],
        range_maps=[RangeMap(**{"from": 0, "to": 5, "text": "low"})],
    )
    assert evaluate_rule(rule, metrics).formatted_value == "UP"


def test_range_map_formatting(metrics):
    rule = Rule(alias="cpu", range_maps=[RangeMap(**{"from": 80, "to": 100, "text": "hot"})])
    assert evaluate_rule(rule, metrics).formatted_value == "hot"


def test_unit_formatting(metrics):
    rule = Rule(alias="cpu", unit="percent", decimals=0)
    assert evaluate_rule(rule, metrics).formatted_value == "90%"


def test_evaluate_all_rules_keeps_order(cpu_rule, metrics):
    rules = [Rule(id="r-status", alias="status"), Rule(id="r-none", alias="nothing"), cpu_rule]
    results = evaluate_all_rules(rules, metrics)
    assert [r.rule_id for r in results] == ["r-status", "rule-cpu"]
