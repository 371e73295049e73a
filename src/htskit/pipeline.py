"""Build pipeline for hierarchical time series.

Core logic: validate → index structure → enumerate nodes → summation matrix
→ aggregate. Every step shares one bottom-series ordering and one node list,
so the rows of S and the aggregated table line up.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from htskit.core.config import AggregationConfig
from htskit.hierarchy.aggregation import AggregatedValues, AggregationEngine
from htskit.hierarchy.levels import AggregateNode, NodeLabeler, enumerate_nodes
from htskit.hierarchy.spec import HierarchySpec
from htskit.hierarchy.structure import SummationMatrix, build_summation_matrix
from htskit.hierarchy.tree import PanelStructure
from htskit.series.validation import validate_panel, validate_unique_periods
from htskit.time import Frequency, TimeIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HtsModel:
    """A fully built hierarchical time series.

    Holds the indexed structure, the ordered node list, the summation matrix
    and the dense aggregation result. Instances are only produced by ``build``
    and are never partially populated.
    """

    spec: HierarchySpec
    config: AggregationConfig
    time_col: str
    value_col: str
    structure: PanelStructure = field(repr=False)
    nodes: list[AggregateNode] = field(repr=False)
    time_index: TimeIndex = field(repr=False)
    summation: SummationMatrix = field(repr=False)
    engine: AggregationEngine = field(repr=False)
    result: AggregatedValues = field(repr=False)

    @property
    def n_series(self) -> int:
        """Total number of series across all aggregation levels."""
        return len(self.nodes)

    @property
    def n_bottom(self) -> int:
        return len(self.structure.series)

    @property
    def n_periods(self) -> int:
        return len(self.time_index)

    @property
    def frequency(self) -> Frequency:
        return self.time_index.frequency

    @property
    def periods(self) -> list[str]:
        return self.time_index.labels

    @property
    def labeler(self) -> NodeLabeler:
        return NodeLabeler(
            self.structure,
            separator=self.config.separator,
            total_label=self.config.total_label,
        )

    def summary(self) -> dict[str, Any]:
        """Structure counts of the model."""
        return {
            "hierarchy": list(self.spec.hierarchy),
            "groups": list(self.spec.groups),
            "n_series": self.n_series,
            "n_bottom": self.n_bottom,
            "n_periods": self.n_periods,
            "frequency": self.frequency.value,
        }

    def summation_matrix(self) -> SummationMatrix:
        return self.summation

    def aggregated_series(self, with_labels: bool = False) -> pd.DataFrame:
        """Long-form aggregated table, one row per (node, period) with data."""
        return self.engine.to_frame(
            self.result,
            self.labeler,
            time_col=self.time_col,
            value_col=self.value_col,
            marker=self.config.aggregated_marker,
            with_labels=with_labels,
        )

    def values_matrix(self) -> np.ndarray:
        """Dense (n_series, n_periods) values, zero where no data contributes."""
        return self.result.values.copy()


def build(
    rows: Any,
    hierarchy_columns: Sequence[str],
    group_columns: Sequence[str],
    time_column: str,
    value_column: str,
    config: AggregationConfig | None = None,
) -> HtsModel:
    """Build a hierarchical time series from bottom-level rows.

    Args:
        rows: Bottom-level panel (DataFrame or convertible)
        hierarchy_columns: Strictly nested columns, top to bottom
        group_columns: Flat columns crossing the hierarchy
        time_column: Column with period strings
        value_column: Column with numeric values
        config: Optional AggregationConfig

    Returns:
        HtsModel with tree, catalog, node list, S and aggregated values

    Raises:
        SpecError: Invalid, duplicate or missing column names
        SchemaError: Rows violate the panel schema
        TimeParseError: Malformed or mixed-frequency periods
        InconsistentPanelError: A bottom series reports a period twice

    Example:
        >>> model = build(df, ["state", "city"], ["sector"], "quarter", "gdp")
        >>> model.summation_matrix().shape
        (21, 8)
    """
    config = config or AggregationConfig()
    spec = HierarchySpec(hierarchy=hierarchy_columns, groups=group_columns)

    panel = validate_panel(rows, spec, time_column, value_column, config)
    structure = PanelStructure.from_rows(panel.paths, panel.group_values, spec)

    labeler = NodeLabeler(structure, separator=config.separator, total_label=config.total_label)
    validate_unique_periods(
        structure.row_series,
        panel.time_index,
        labeler.series_labels(),
        policy=config.duplicates,
    )

    nodes = enumerate_nodes(structure, group_mode=config.group_mode)
    summation = build_summation_matrix(structure, nodes, labeler)

    engine = AggregationEngine(
        structure,
        nodes,
        panel.time_index,
        panel.values,
        summation=summation,
    )
    result = engine.aggregate(config.strategy)

    logger.info(
        "Built hierarchical time series: %d series (%d bottom) over %d %s periods",
        len(nodes),
        len(structure.series),
        len(panel.time_index),
        panel.time_index.frequency.value,
    )
    return HtsModel(
        spec=spec,
        config=config,
        time_col=time_column,
        value_col=value_column,
        structure=structure,
        nodes=nodes,
        time_index=panel.time_index,
        summation=summation,
        engine=engine,
        result=result,
    )


def summation_matrix(model: HtsModel) -> dict[str, Any]:
    """Return {'matrix', 'row_labels', 'col_labels'} for a built model."""
    return model.summation.to_dict()


def aggregated_series(model: HtsModel, with_labels: bool = False) -> pd.DataFrame:
    """Return the long-form aggregated table for a built model."""
    return model.aggregated_series(with_labels=with_labels)


__all__ = ["HtsModel", "build", "summation_matrix", "aggregated_series"]
