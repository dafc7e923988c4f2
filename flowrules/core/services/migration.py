"""
Legacy Migration - Converts rules saved by the older flowcharting panel.

The legacy format stores rules under ``rulesData`` with per-directive
condition codes (``colorOn``/``textOn``/``linkOn``/``eventOn``) and flat
threshold/color arrays shared by the discrete and gradient modes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, get_args

from flowrules.core.domain.constants import (
    AggregationType,
    AnimationType,
    ColorTarget,
    MappingCondition,
    MetricType,
    TextReplaceMode,
)
from flowrules.core.domain.rule import (
    EventMap,
    LinkMap,
    RangeMap,
    Rule,
    ShapeMap,
    TextMap,
    ThresholdColors,
    ThresholdSpec,
    ValueMap,
)

logger = logging.getLogger(__name__)

LEGACY_PANEL_TYPE = "agenty-flowcharting-panel"

LEGACY_CONDITIONS = {
    "a": MappingCondition.ALWAYS,
    "wc": MappingCondition.CRITICAL,
    "ww": MappingCondition.WARNING,
    "wmd": MappingCondition.ALWAYS,  # "when metric has data"
    "n": MappingCondition.NEVER,
}


@dataclass
class MigrationResult:
    success: bool
    rules: list[Rule] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def is_legacy_panel(panel: dict[str, Any]) -> bool:
    """Whether a panel/options document uses the legacy rule layout."""
    return bool(
        panel.get("type") == LEGACY_PANEL_TYPE
        or panel.get("flowchartsData")
        or panel.get("rulesData")
    )


def migrate_legacy_panel(panel: dict[str, Any]) -> MigrationResult:
    """
    Migrate the rules of a legacy panel.

    The whole panel is migrated or nothing is: any malformed rule makes the
    result unsuccessful with no rules and the error in ``warnings``.
    """
    warnings: list[str] = []
    rules_data = _legacy_rules_data(panel)
    if not isinstance(rules_data, list):
        warnings.append("No legacy rules found")
        return MigrationResult(success=True, warnings=warnings)

    try:
        rules = [migrate_legacy_rule(old, idx, warnings) for idx, old in enumerate(rules_data)]
    except Exception as e:
        logger.error(f"Legacy migration failed: {e}")
        return MigrationResult(success=False, warnings=[*warnings, f"Migration error: {e}"])

    logger.info(f"Migrated {len(rules)} legacy rules ({len(warnings)} warnings)")
    return MigrationResult(success=True, rules=rules, warnings=warnings)


def migrate_legacy_rule(old: dict[str, Any], idx: int, warnings: list[str]) -> Rule:
    """Convert a single legacy rule; problems that can be defaulted are added to ``warnings``."""
    name = old.get("alias") or old.get("name") or f"Rule {idx + 1}"

    def choice(value: Any, allowed: Any, default: str, what: str) -> str:
        value = value or default
        if value not in get_args(allowed):
            warnings.append(f"{name}: unsupported {what} '{value}', using '{default}'")
            return default
        return value

    def condition(code: str | None) -> MappingCondition:
        code = code or "a"
        if code not in LEGACY_CONDITIONS:
            warnings.append(f"{name}: unknown condition '{code}', using 'always'")
        return LEGACY_CONDITIONS.get(code, MappingCondition.ALWAYS)

    shape_maps = [
        ShapeMap(
            pattern=sd.get("pattern") or ".*",
            hidden=bool(sd.get("hidden", False)),
            target=choice(sd.get("style"), ColorTarget, "fillColor", "color target"),
            when=condition(sd.get("colorOn")),
        )
        for sd in old.get("shapeData") or []
    ]

    text_maps = [
        TextMap(
            pattern=td.get("pattern") or ".*",
            hidden=bool(td.get("hidden", False)),
            mode=choice(td.get("textReplace"), TextReplaceMode, "content", "text mode"),
            template=td.get("textPattern") or "${_formattedValue}",
            when=condition(td.get("textOn")),
        )
        for td in old.get("textData") or []
    ]

    link_maps = [
        LinkMap(
            pattern=ld.get("pattern") or ".*",
            hidden=bool(ld.get("hidden", False)),
            url=ld.get("linkUrl") or ld.get("url") or "",
            link_target="_blank",
            when=condition(ld.get("linkOn")),
        )
        for ld in old.get("linkData") or []
    ]

    event_maps = [
        EventMap(
            pattern=ed.get("pattern") or ".*",
            hidden=bool(ed.get("hidden", False)),
            animation=choice(ed.get("animation") or ed.get("type"), AnimationType, "blink", "animation"),
            duration=ed.get("duration") if ed.get("duration") is not None else 1000,
            when=condition(ed.get("eventOn")),
        )
        for ed in old.get("eventData") or []
    ]

    value_maps = [
        ValueMap(value=str(vd.get("value", "")), text=vd.get("text") or "")
        for vd in old.get("valueData") or []
    ]
    range_maps = [
        RangeMap(**{"from": rd.get("from") or 0, "to": rd.get("to") or 0, "text": rd.get("text") or ""})
        for rd in old.get("rangeData") or []
    ]

    is_gradient = old.get("gradient") is True
    old_colors = old.get("colors") if isinstance(old.get("colors"), list) else []
    old_thresholds = _numbers(old.get("thresholds"))

    thresholds = [
        ThresholdSpec(value=50, level=1, comparator=">="),
        ThresholdSpec(value=80, level=2, comparator=">="),
    ]
    colors = ThresholdColors()

    if not is_gradient:
        if len(old_thresholds) >= 2:
            thresholds = [
                ThresholdSpec(value=old_thresholds[0], level=1, comparator=">="),
                ThresholdSpec(value=old_thresholds[1], level=2, comparator=">="),
            ]
        elif old_thresholds:
            warnings.append(f"{name}: fewer than two thresholds, using defaults 50/80")
        if len(old_colors) >= 3:
            colors = ThresholdColors(ok=old_colors[0], warning=old_colors[1], critical=old_colors[2])

    return Rule(
        id=f"rule-migrated-{idx + 1}",
        name=name,
        enabled=old.get("hidden") is not True,
        order=old.get("order") if old.get("order") is not None else idx + 1,
        metric_type=choice(old.get("metricType"), MetricType, "series", "metric type"),
        pattern=old.get("pattern") or ".*",
        alias=old.get("alias") or "",
        column=old.get("column") or "",
        aggregation=choice(old.get("aggregation"), AggregationType, "current", "aggregation"),
        thresholds=thresholds,
        invert=bool(old.get("invert", False)),
        colors=colors,
        gradient=is_gradient,
        gradient_colors=old_colors if is_gradient else [],
        gradient_thresholds=old_thresholds if is_gradient else [],
        unit=old.get("unit") or "short",
        decimals=old.get("decimals") if old.get("decimals") is not None else 2,
        shape_maps=shape_maps,
        text_maps=text_maps,
        link_maps=link_maps,
        event_maps=event_maps,
        value_maps=value_maps,
        range_maps=range_maps,
    )


def _legacy_rules_data(panel: dict[str, Any]) -> Any:
    rules_data = panel.get("rulesData")
    if isinstance(rules_data, dict):
        return rules_data.get("rulesData")
    if rules_data is not None:
        return rules_data
    options_rules = (panel.get("options") or {}).get("rulesData") or {}
    return options_rules.get("rulesData") if isinstance(options_rules, dict) else options_rules


def _numbers(values: Any) -> list[float]:
    if not isinstance(values, list):
        return []
    result = []
    for v in values:
        try:
            number = float(v)
        except (TypeError, ValueError):
            continue
        if number == number:
            result.append(number)
    return result
