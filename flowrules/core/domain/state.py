"""
State Domain Models - Rule results and the per-element visual state built from them.

Both are recomputed on every refresh; nothing here is persisted.
"""

from dataclasses import dataclass


@dataclass
class RuleResult:
    """Outcome of evaluating one rule against the current metrics."""

    rule_id: str
    rule_name: str
    value: float
    level: int
    color: str
    formatted_value: str
    matched: bool = True
    metric_name: str = ""


@dataclass
class ShapeState:
    fill_color: str | None = None
    stroke_color: str | None = None
    font_color: str | None = None
    bg_color: str | None = None
    opacity: float | None = None
    visible: bool = True


@dataclass
class TextState:
    value: str | None
    original_value: str | None = None


@dataclass
class LinkState:
    url: str
    target: str = "_blank"
    params: str = ""


@dataclass
class TooltipState:
    content: str = ""
    metric_name: str = ""
    value: str = ""


@dataclass
class EventState:
    animation: str
    duration: int = 1000  # ms
    active: bool = True


@dataclass
class ElementState:
    """
    Accumulated visual state of one diagram element for a single refresh.

    Scalar fields reflect the last rule that touched the element; the
    sub-records are set per directive kind.
    """

    element_id: str
    rule_id: str
    rule_name: str
    level: int
    value: float | str
    formatted_value: str
    color: str
    matched: bool
    timestamp: float
    shape: ShapeState | None = None
    text: TextState | None = None
    link: LinkState | None = None
    tooltip: TooltipState | None = None
    event: EventState | None = None
