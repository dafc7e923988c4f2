"""
Metric Domain Models - Numeric series extracted from input frames.
"""

from dataclasses import dataclass, field


@dataclass
class ProcessedMetric:
    """One named numeric series ready for rule matching."""

    name: str
    source_id: str
    values: list[float]
    timestamps: list[int] = field(default_factory=list)  # epoch ms, aligned with values or empty
    last_value: float = 0.0
    aggregated_value: float = 0.0
    aggregation: str = "current"
    field_name: str = ""
    column_name: str = ""  # discriminator value for pivoted frames (e.g. a MAC address)
