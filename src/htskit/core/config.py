"""Configuration for building hierarchical time series.

A single frozen config controls labelling, the group-crossing rule, duplicate
handling and the aggregation strategy. Defaults match the documented behavior,
so most callers never construct one.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

GroupMode = Literal["separate", "crossed"]
DuplicatePolicy = Literal["reject", "sum"]
AggregationStrategy = Literal["matrix", "direct"]


class BaseSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class AggregationConfig(BaseSpec):
    """Options for an engine run.

    Args:
        separator: Single character joining path segments in labels
        total_label: Label of the root node with no group set
        aggregated_marker: Placeholder written in output columns a node leaves free
        group_mode: 'separate' crosses each group column with the hierarchy on
            its own; 'crossed' also crosses group columns with each other
        duplicates: 'reject' raises on repeated (series, period) rows, 'sum'
            adds them up
        strategy: 'matrix' computes S @ B per period, 'direct' filters rows by
            node constraints; both give identical values
    """

    separator: str = "/"
    total_label: str = Field("Total", min_length=1)
    aggregated_marker: str = Field("<aggregated>", min_length=1)
    group_mode: GroupMode = "separate"
    duplicates: DuplicatePolicy = "reject"
    strategy: AggregationStrategy = "matrix"

    @model_validator(mode="after")
    def _check_separator(self) -> AggregationConfig:
        if len(self.separator) != 1 or self.separator.isspace():
            raise ValueError("separator must be a single non-whitespace character.")
        if self.separator in self.total_label:
            raise ValueError("total_label must not contain the separator.")
        return self

    @classmethod
    def strict(cls) -> AggregationConfig:
        """Reject duplicate rows and aggregate through the summation matrix."""
        return cls(duplicates="reject", strategy="matrix")

    @classmethod
    def lenient(cls) -> AggregationConfig:
        """Sum duplicate (series, period) rows instead of failing."""
        return cls(duplicates="sum", strategy="matrix")
