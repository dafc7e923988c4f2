"""
Rule Domain Model - Core data structures for rule configuration.

Uses Pydantic for validation. Field names are snake_case in Python; the
camelCase keys used by stored panel JSON (``shapeMaps``, ``gradientColors``,
``linkTarget`` ...) are accepted as aliases.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flowrules.core.domain.constants import (
    DEFAULT_COLORS,
    AggregationType,
    AnimationType,
    ColorTarget,
    ComparatorType,
    LinkTarget,
    MappingCondition,
    MetricType,
    TextReplaceMode,
    ThresholdLevel,
)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ThresholdSpec(_ConfigModel):
    """A single discrete threshold."""

    value: float | str
    level: ThresholdLevel
    comparator: ComparatorType = ">="


class ThresholdColors(_ConfigModel):
    """Colors used for each severity level."""

    ok: str = DEFAULT_COLORS["ok"]
    warning: str = DEFAULT_COLORS["warning"]
    critical: str = DEFAULT_COLORS["critical"]


# --- Mapping directives ---

class ShapeMap(_ConfigModel):
    """Colors (and optionally hides) matched elements."""

    pattern: str = ".*"
    hidden: bool = False
    target: ColorTarget = "fillColor"
    when: MappingCondition = MappingCondition.ALWAYS
    enabled: bool = True


class TextMap(_ConfigModel):
    """Replaces the label of matched elements."""

    pattern: str = ".*"
    hidden: bool = False
    mode: TextReplaceMode = "content"
    template: str = "${_formattedValue}"
    when: MappingCondition = MappingCondition.ALWAYS
    enabled: bool = True


class LinkMap(_ConfigModel):
    """Makes matched elements clickable."""

    pattern: str = ".*"
    hidden: bool = False
    url: str = ""
    link_target: LinkTarget = "_blank"
    params: str = ""
    when: MappingCondition = MappingCondition.ALWAYS
    enabled: bool = True


class EventMap(_ConfigModel):
    """Animates matched elements."""

    pattern: str = ".*"
    hidden: bool = False
    animation: AnimationType = "blink"
    duration: int = 1000  # ms
    when: MappingCondition = MappingCondition.ALWAYS
    enabled: bool = True


# --- Value formatting maps ---

class ValueMap(_ConfigModel):
    value: str
    text: str
    enabled: bool = True


class RangeMap(_ConfigModel):
    from_: float = Field(alias="from")
    to: float
    text: str
    enabled: bool = True


class Rule(_ConfigModel):
    """
    Complete rule configuration.

    Rules are evaluated in list order; a later rule overrides an earlier one
    on every element they both touch.
    """

    # --- Identity ---
    id: str = Field(default_factory=lambda: f"rule-{uuid.uuid4().hex[:8]}")
    name: str = "Rule"
    enabled: bool = True
    order: int = 0

    # --- Metric Matching ---
    metric_type: MetricType = "series"
    pattern: str = ".*"
    alias: str = ""
    column: str = ""  # exact column/discriminator value, e.g. a MAC address
    aggregation: AggregationType = "current"

    # --- Thresholds ---
    thresholds: list[ThresholdSpec] = Field(default_factory=list)
    invert: bool = False
    colors: ThresholdColors = Field(default_factory=ThresholdColors)

    # --- Gradient Mode ---
    gradient: bool = False
    gradient_colors: list[str] = Field(default_factory=list)
    gradient_thresholds: list[float] = Field(default_factory=list)

    # --- Format ---
    unit: str = "short"
    decimals: int = 2

    # --- Mappings ---
    shape_maps: list[ShapeMap] = Field(default_factory=list)
    text_maps: list[TextMap] = Field(default_factory=list)
    link_maps: list[LinkMap] = Field(default_factory=list)
    event_maps: list[EventMap] = Field(default_factory=list)

    # --- Value / Range Maps ---
    value_maps: list[ValueMap] = Field(default_factory=list)
    range_maps: list[RangeMap] = Field(default_factory=list)

    def directives(self) -> list[ShapeMap | TextMap | LinkMap | EventMap]:
        """All mapping directives of the rule, shape maps first."""
        return [*self.shape_maps, *self.text_maps, *self.link_maps, *self.event_maps]


def create_default_rule(name: str = "Rule") -> Rule:
    """A new rule with warning/critical thresholds at 50/80 that colors every element."""
    return Rule(
        name=name,
        thresholds=[
            ThresholdSpec(value=50, level=1, comparator=">="),
            ThresholdSpec(value=80, level=2, comparator=">="),
        ],
        shape_maps=[ShapeMap(pattern=".*", target="fillColor")],
    )
