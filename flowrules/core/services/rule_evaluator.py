"""
Rule Evaluator - Evaluates a rule against the current metrics.

One rule yields at most one RuleResult: the aggregate of every value of
every matched metric, its severity level and color, and its display text.
"""

import logging
from typing import Callable, Sequence

from flowrules.core.domain.metric import ProcessedMetric
from flowrules.core.domain.rule import Rule
from flowrules.core.domain.state import RuleResult
from flowrules.core.services.formatting import apply_range_maps, apply_value_maps, format_value
from flowrules.core.services.metric_processor import aggregate, find_matching_metrics
from flowrules.core.services.patterns import PatternCache
from flowrules.core.services.threshold_evaluator import evaluate_gradient, evaluate_threshold

logger = logging.getLogger(__name__)

HostVariableResolver = Callable[[str], str]


def identity(text: str) -> str:
    return text


def evaluate_rule(
    rule: Rule,
    metrics: Sequence[ProcessedMetric],
    resolve_host_variable: HostVariableResolver = identity,
    cache: PatternCache | None = None,
) -> RuleResult | None:
    """
    Evaluate a single rule.

    Args:
        rule: Rule configuration
        metrics: Metrics of the current refresh
        resolve_host_variable: Host-level template substitution for alias/column
        cache: Optional compiled-pattern cache shared across rules

    Returns:
        The rule's result, or None when the rule is disabled or matches no metric
    """
    if not rule.enabled:
        return None

    matched = find_matching_metrics(
        list(metrics),
        rule.alias or rule.pattern,
        resolve_host_variable,
        column=rule.column or None,
        cache=cache,
    )
    if not matched:
        logger.debug(f"Rule '{rule.name}' ({rule.id}) matched no metric")
        return None

    values = [v for m in matched for v in m.values]
    if not values:
        return None

    value = aggregate(values, rule.aggregation)

    if rule.gradient and rule.gradient_colors and rule.gradient_thresholds:
        threshold = evaluate_gradient(value, rule.gradient_thresholds, rule.gradient_colors, rule.invert)
    else:
        threshold = evaluate_threshold(value, rule.thresholds, rule.colors, rule.invert)

    formatted = apply_value_maps(value, rule.value_maps)
    if formatted is None:
        formatted = apply_range_maps(value, rule.range_maps)
    if formatted is None:
        formatted = format_value(value, rule.unit, rule.decimals)

    return RuleResult(
        rule_id=rule.id,
        rule_name=rule.name,
        value=value,
        level=threshold.level,
        color=threshold.color,
        formatted_value=formatted,
        matched=True,
        metric_name=matched[0].name,
    )


def evaluate_all_rules(
    rules: Sequence[Rule],
    metrics: Sequence[ProcessedMetric],
    resolve_host_variable: HostVariableResolver = identity,
) -> list[RuleResult]:
    """Evaluate every rule independently, keeping rule order and dropping empty results."""
    cache = PatternCache()
    results = []
    for rule in rules:
        result = evaluate_rule(rule, metrics, resolve_host_variable, cache)
        if result is not None:
            results.append(result)
    logger.info(f"Evaluated {len(rules)} rules against {len(metrics)} metrics: {len(results)} results")
    return results
