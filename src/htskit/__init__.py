"""htskit - Hierarchical and grouped time series aggregation.

Expands a bottom-level panel (hierarchy columns, group columns, a period and
a value) into every aggregate series implied by the structure, together with
the summation matrix S mapping bottom series to all series.

Basic usage:
    >>> from htskit import build
    >>> model = build(df, ["state", "city"], ["sector"], "quarter", "gdp")
    >>> model.summary()
    >>> s = model.summation_matrix()       # S, row labels, column labels
    >>> table = model.aggregated_series()  # one row per (series, period)

Supported period formats: 'YYYY', 'YYYY Qn', 'YYYY Mnn', 'YYYY Wnn', 'YYYY-MM-DD'.
"""

__version__ = "0.1.0"

from htskit.core.config import AggregationConfig
from htskit.core.errors import (
    HtsError,
    InconsistentPanelError,
    InternalConsistencyError,
    SchemaError,
    SpecError,
    TimeParseError,
)
from htskit.hierarchy import AggregateNode, HierarchySpec, SummationMatrix
from htskit.pipeline import HtsModel, aggregated_series, build, summation_matrix
from htskit.time import Frequency, TimeIndex, TimePeriod, parse_period

__all__ = [
    "__version__",
    # Entry points
    "build",
    "summation_matrix",
    "aggregated_series",
    "HtsModel",
    # Structure
    "HierarchySpec",
    "AggregateNode",
    "SummationMatrix",
    "AggregationConfig",
    # Time
    "Frequency",
    "TimePeriod",
    "TimeIndex",
    "parse_period",
    # Errors
    "HtsError",
    "SpecError",
    "SchemaError",
    "TimeParseError",
    "InconsistentPanelError",
    "InternalConsistencyError",
]
