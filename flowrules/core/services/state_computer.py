"""
State Computer - Builds the per-element visual state for one refresh.

Rules are applied in configured order. Every directive that applies to an
element is folded into that element's state by ``merge_directive``: the
scalar identity fields always take the latest rule's values, the shape
record is updated field by field, and the text, link and event records are
replaced wholesale. Elements no directive touched are absent from the map.
"""

import dataclasses
import logging
import time
from typing import Mapping, Sequence

from flowrules.core.domain.constants import DEFAULT_COLORS, LEVEL_CRITICAL, LEVEL_OK, LEVEL_WARNING, MappingCondition
from flowrules.core.domain.rule import EventMap, LinkMap, Rule, ShapeMap, TextMap
from flowrules.core.domain.state import (
    ElementState,
    EventState,
    LinkState,
    RuleResult,
    ShapeState,
    TextState,
    TooltipState,
)
from flowrules.core.services.patterns import PatternCache, match_any
from flowrules.core.services.variables import resolve_text_template

logger = logging.getLogger(__name__)

Directive = ShapeMap | TextMap | LinkMap | EventMap

_SHAPE_TARGET_FIELDS = {
    "fillColor": "fill_color",
    "strokeColor": "stroke_color",
    "fontColor": "font_color",
    "bgColor": "bg_color",
    "gradientColor": "fill_color",
}


def compute_states(
    rules: Sequence[Rule],
    results: Sequence[RuleResult],
    element_ids: Sequence[str],
    element_labels: Mapping[str, str],
) -> dict[str, ElementState]:
    """
    Compute the state of every element touched by at least one directive.

    Args:
        rules: Rules in configured order
        results: Output of the rule evaluator for this refresh
        element_ids: All element identifiers of the diagram
        element_labels: Element id -> current label

    Returns:
        Fresh element id -> ElementState map
    """
    states: dict[str, ElementState] = {}
    cache = PatternCache()
    result_by_rule = {r.rule_id: r for r in results}
    now = time.time()

    logger.info(f"Computing states: {len(rules)} rules, {len(results)} results, {len(element_ids)} elements")

    for rule in rules:
        if not rule.enabled:
            continue

        result = result_by_rule.get(rule.id)
        if result is None:
            if not any(d.enabled and d.when == MappingCondition.ALWAYS for d in rule.directives()):
                logger.debug(f"Rule '{rule.name}' ({rule.id}) has no result, skipping")
                continue
            # Keep "always" directives (e.g. links) working without data
            result = no_data_result(rule)
            logger.debug(f"Rule '{rule.name}' has no data, applying 'always' directives only")

        for directive in rule.directives():
            if not directive.enabled or not should_apply(directive.when, result.level):
                continue
            for element_id in match_elements(directive.pattern, element_ids, element_labels, cache):
                states[element_id] = merge_directive(
                    states.get(element_id),
                    element_id,
                    directive,
                    result,
                    element_labels.get(element_id) or "",
                    now,
                )

    logger.info(f"Computed {len(states)} element states")
    return states


def should_apply(when: MappingCondition | str, level: int) -> bool:
    """Whether a directive with condition ``when`` applies at severity ``level``."""
    condition = MappingCondition(when)
    if condition is MappingCondition.ALWAYS:
        return True
    if condition is MappingCondition.OK:
        return level == LEVEL_OK
    if condition is MappingCondition.WARNING:
        return level == LEVEL_WARNING
    if condition is MappingCondition.CRITICAL:
        return level == LEVEL_CRITICAL
    return False


def no_data_result(rule: Rule) -> RuleResult:
    return RuleResult(
        rule_id=rule.id,
        rule_name=rule.name,
        value=0,
        level=LEVEL_OK,
        color=rule.colors.ok or DEFAULT_COLORS["ok"],
        formatted_value="",
        matched=False,
        metric_name="",
    )


def match_elements(
    pattern: str,
    element_ids: Sequence[str],
    element_labels: Mapping[str, str],
    cache: PatternCache | None = None,
) -> list[str]:
    """Element ids whose id or label matches ``pattern``."""
    matched = [
        element_id for element_id in element_ids
        if match_any((element_id, element_labels.get(element_id) or ""), pattern, cache)
    ]
    if not matched and pattern != ".*":
        logger.debug(f"Pattern '{pattern}' matched no element")
    return matched


def merge_directive(
    existing: ElementState | None,
    element_id: str,
    directive: Directive,
    result: RuleResult,
    label: str,
    timestamp: float,
) -> ElementState:
    """
    Fold one directive of one rule into an element's state.

    Returns a new ElementState; ``existing`` is not modified.
    """
    identity = dict(
        rule_id=result.rule_id,
        rule_name=result.rule_name,
        level=result.level,
        value=result.value,
        formatted_value=result.formatted_value,
        color=result.color,
        # False when an "always" directive touches the element without data
        matched=result.matched,
        timestamp=timestamp,
    )
    if existing is None:
        state = ElementState(
            element_id=element_id,
            tooltip=TooltipState(metric_name=result.metric_name, value=result.formatted_value),
            **identity,
        )
    else:
        state = dataclasses.replace(existing, **identity)

    if isinstance(directive, ShapeMap):
        shape = state.shape or ShapeState(visible=not directive.hidden)
        return dataclasses.replace(state, shape=dataclasses.replace(
            shape,
            **{_SHAPE_TARGET_FIELDS[directive.target]: result.color},
            visible=not directive.hidden,
        ))

    if isinstance(directive, TextMap):
        resolved = resolve_text_template(directive.template or "${_formattedValue}", state, label)
        if directive.mode == "append":
            resolved = label + resolved
        elif directive.mode == "prepend":
            resolved = resolved + label
        return dataclasses.replace(state, text=TextState(value=resolved, original_value=label or None))

    if isinstance(directive, LinkMap):
        return dataclasses.replace(state, link=LinkState(
            url=directive.url,
            target=directive.link_target,
            params=directive.params,
        ))

    if isinstance(directive, EventMap):
        return dataclasses.replace(state, event=EventState(
            animation=directive.animation,
            duration=directive.duration,
            active=True,
        ))

    raise TypeError(f"Unsupported directive type: {type(directive).__name__}")
