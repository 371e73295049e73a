"""Core module - errors and configuration shared across htskit."""

from htskit.core.config import AggregationConfig
from htskit.core.errors import (
    HtsError,
    InconsistentPanelError,
    InternalConsistencyError,
    SchemaError,
    SpecError,
    TimeParseError,
)

__all__ = [
    # Config
    "AggregationConfig",
    # Errors
    "HtsError",
    "SpecError",
    "SchemaError",
    "TimeParseError",
    "InconsistentPanelError",
    "InternalConsistencyError",
]
