from typing import Literal
from pydantic import BaseModel, Field

from flowrules.core.domain.constants import AggregationType

class EngineSettings(BaseModel):
    """
    Global engine configuration settings.
    """
    rules_file: str = Field(default="rules.yaml", description="Path to rules configuration file")

    # Metric processing
    default_aggregation: AggregationType = Field(default="current", description="Aggregation precomputed on every metric")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
