"""Aggregation of bottom-level values to every aggregate node.

Two strategies produce the same table:

- matrix: build the bottom matrix B (n_bottom x n_periods, zero where a series
  has no row in a period) and compute S @ B.
- direct: for each node, select the raw rows consistent with its constraints
  and sum them per period, without touching S.

A (node, period) cell is reported only when at least one bottom row
contributes to it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from htskit.core.config import AggregationStrategy
from htskit.hierarchy.levels import AggregateNode, NodeLabeler
from htskit.hierarchy.structure import SummationMatrix, node_mask
from htskit.hierarchy.tree import PanelStructure
from htskit.time import TimeIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregatedValues:
    """Dense aggregation result aligned with the node list and time index.

    Attributes:
        values: Sums of shape (n_nodes, n_periods)
        counts: Number of contributing bottom rows per cell
    """

    values: np.ndarray = field(repr=False)
    counts: np.ndarray = field(repr=False)

    @property
    def present(self) -> np.ndarray:
        """Cells with at least one contributing bottom row."""
        return self.counts > 0


class AggregationEngine:
    """Sums bottom-level rows for every aggregate node and period.

    Args:
        structure: Tree, catalog, series index and row -> series mapping
        nodes: Aggregate nodes in enumeration order
        time_index: Parsed periods and each row's period position
        row_values: Numeric value of each input row
        summation: Summation matrix over the same nodes (required for 'matrix')
    """

    def __init__(
        self,
        structure: PanelStructure,
        nodes: Sequence[AggregateNode],
        time_index: TimeIndex,
        row_values: np.ndarray,
        summation: SummationMatrix | None = None,
    ) -> None:
        if len(row_values) != len(structure.row_series):
            raise ValueError("row_values must have one entry per indexed row")
        if len(time_index.positions) != len(row_values):
            raise ValueError("time_index must have one position per row")

        self.structure = structure
        self.nodes = list(nodes)
        self.time_index = time_index
        self.row_values = np.asarray(row_values, dtype=float)
        self.summation = summation

    def bottom_matrix(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (B, counts) of shape (n_bottom, n_periods).

        Missing (series, period) cells are 0 in B and 0 in counts.
        """
        shape = (len(self.structure.series), len(self.time_index))
        index = (self.structure.row_series, self.time_index.positions)

        b_matrix = np.zeros(shape, dtype=float)
        counts = np.zeros(shape, dtype=np.int64)
        np.add.at(b_matrix, index, self.row_values)
        np.add.at(counts, index, 1)
        return b_matrix, counts

    def aggregate(self, strategy: AggregationStrategy = "matrix") -> AggregatedValues:
        if strategy == "matrix":
            result = self._aggregate_matrix()
        elif strategy == "direct":
            result = self._aggregate_direct()
        else:
            raise ValueError(f"Unknown aggregation strategy: {strategy}")

        logger.debug(
            "Aggregated %d nodes over %d periods (%s): %d non-empty cells",
            len(self.nodes),
            len(self.time_index),
            strategy,
            int(result.present.sum()),
        )
        return result

    def _aggregate_matrix(self) -> AggregatedValues:
        if self.summation is None:
            raise ValueError("Matrix aggregation requires a summation matrix")

        s_matrix = self.summation.matrix
        if s_matrix.shape[0] != len(self.nodes):
            raise ValueError(
                f"Summation matrix has {s_matrix.shape[0]} rows for {len(self.nodes)} nodes"
            )

        b_matrix, bottom_counts = self.bottom_matrix()
        values = s_matrix @ b_matrix
        counts = s_matrix @ bottom_counts
        return AggregatedValues(values=values, counts=counts)

    def _aggregate_direct(self) -> AggregatedValues:
        tree = self.structure.tree
        series = self.structure.series
        row_series = self.structure.row_series
        n_periods = len(self.time_index)
        positions = self.time_index.positions

        # Lift per-series attributes to per-row attributes
        row_ancestors = [
            series.ancestors(tree, depth)[row_series] for depth in range(tree.depth + 1)
        ]
        row_groups = series.group_positions(len(self.structure.catalog))[row_series]

        values = np.zeros((len(self.nodes), n_periods), dtype=float)
        counts = np.zeros((len(self.nodes), n_periods), dtype=np.int64)
        for i, node in enumerate(self.nodes):
            mask = node_mask(node, row_ancestors, row_groups)
            values[i] = np.bincount(
                positions[mask], weights=self.row_values[mask], minlength=n_periods
            )
            counts[i] = np.bincount(positions[mask], minlength=n_periods)
        return AggregatedValues(values=values, counts=counts)

    def to_frame(
        self,
        result: AggregatedValues,
        labeler: NodeLabeler,
        time_col: str,
        value_col: str,
        marker: str,
        with_labels: bool = False,
        id_col: str = "unique_id",
    ) -> pd.DataFrame:
        """Long-form table: one row per (node, period) with data present.

        Rows follow node enumeration order, then ascending period.
        """
        category_columns = list(self.structure.tree.columns) + list(self.structure.catalog.columns)
        node_idx, period_idx = np.nonzero(result.present)

        node_values = [labeler.category_values(node, marker) for node in self.nodes]
        data: dict[str, list] = {}
        if with_labels:
            node_labels = labeler.labels(self.nodes)
            data[id_col] = [node_labels[i] for i in node_idx]
        for column in category_columns:
            data[column] = [node_values[i][column] for i in node_idx]

        period_labels = self.time_index.labels
        data[time_col] = [period_labels[t] for t in period_idx]
        data[value_col] = result.values[node_idx, period_idx].astype(float)

        columns = ([id_col] if with_labels else []) + category_columns + [time_col, value_col]
        return pd.DataFrame(data, columns=columns)
