"""
Constants - Shared vocabularies for rules, directives and severity levels.
"""

from enum import Enum
from typing import Literal


AggregationType = Literal[
    "current", "min", "max", "avg", "sum", "count",
    "delta", "diff", "range", "first", "last",
]

ComparatorType = Literal[">", "<", ">=", "<=", "==", "!="]

ColorTarget = Literal["fillColor", "strokeColor", "fontColor", "bgColor", "gradientColor"]

TextReplaceMode = Literal["content", "pattern", "append", "prepend"]

AnimationType = Literal["blink", "fade", "pulse", "flow", "rotate"]

LinkTarget = Literal["_blank", "_self", "_top", "_parent"]

MetricType = Literal["series", "table"]

# 0 = ok, 1 = warning, 2 = critical
ThresholdLevel = Literal[0, 1, 2]

LEVEL_OK = 0
LEVEL_WARNING = 1
LEVEL_CRITICAL = 2


class MappingCondition(str, Enum):
    """Severity condition under which a directive applies."""

    ALWAYS = "always"
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    NEVER = "never"


DEFAULT_COLORS = {
    "ok": "#73BF69",
    "warning": "#FF9830",
    "critical": "#F2495C",
    "no_data": "#999999",
    "disabled": "#CCCCCC",
}
