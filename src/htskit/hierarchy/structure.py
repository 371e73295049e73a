"""Summation matrix for hierarchical and grouped time series.

S[i, j] = 1 when bottom series j is consistent with aggregate node i: the
node's hierarchy prefix is a prefix of the series' path and every group value
the node fixes equals the series' value for that column.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from htskit.core.errors import InternalConsistencyError, SchemaError
from htskit.hierarchy.levels import AggregateNode, NodeLabeler
from htskit.hierarchy.tree import PanelStructure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummationMatrix:
    """Summation matrix with labels aligned to its rows and columns.

    Attributes:
        matrix: S of shape (n_series, n_bottom) with entries in {0, 1}
        row_labels: Label of every aggregate node, in enumeration order
        col_labels: Label of every bottom series, in first-seen order
        row_levels: Aggregation level name of every row (e.g. 'state/sector')

    Example (state -> city, no groups):
                    RJ/RJ  RJ/DdC  SP/SP  SP/Camp
        Total         1      1       1       1
        RJ            1      1       0       0
        SP            0      0       1       1
        RJ/RJ         1      0       0       0
        ...
    """

    matrix: np.ndarray = field(repr=False)
    row_labels: list[str]
    col_labels: list[str]
    row_levels: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        n_rows, n_cols = len(self.row_labels), len(self.col_labels)
        if self.matrix.shape != (n_rows, n_cols):
            raise InternalConsistencyError(
                f"S matrix shape {self.matrix.shape} doesn't match labels ({n_rows}, {n_cols})"
            )
        if self.row_levels and len(self.row_levels) != n_rows:
            raise InternalConsistencyError("row_levels must align with row_labels")
        if not np.all(np.isin(self.matrix, [0, 1])):
            raise InternalConsistencyError("S matrix must contain only 0s and 1s")

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape

    def to_dict(self) -> dict[str, object]:
        """Matrix and labels as a plain mapping."""
        return {
            "matrix": self.matrix,
            "row_labels": list(self.row_labels),
            "col_labels": list(self.col_labels),
        }

    def to_frame(self, id_col: str = "unique_id") -> pd.DataFrame:
        """Return S as a DataFrame with the row label in ``id_col``."""
        s_df = pd.DataFrame(self.matrix, columns=self.col_labels)
        s_df.insert(0, id_col, self.row_labels)
        return s_df

    def tags(self) -> dict[str, np.ndarray]:
        """Return mapping of aggregation level name -> row labels in that level."""
        tags: dict[str, list[str]] = {}
        for level, label in zip(self.row_levels, self.row_labels):
            tags.setdefault(level, []).append(label)
        return {level: np.array(labels, dtype=object) for level, labels in tags.items()}


def node_mask(
    node: AggregateNode,
    ancestors: Sequence[np.ndarray],
    group_matrix: np.ndarray,
) -> np.ndarray:
    """Boolean mask of the items consistent with a node's constraints.

    Args:
        node: Aggregate node
        ancestors: Per depth, the tree index of each item's ancestor at that depth
        group_matrix: Per item, catalog positions of its group values

    Items are bottom series when building S, or raw rows when summing directly.
    """
    mask = ancestors[node.depth] == node.tree_node
    for column, value in node.groups:
        mask &= group_matrix[:, column] == value
    return mask


class SummationMatrixBuilder:
    """Builds S and its labels from a shared node list and series ordering."""

    def __init__(
        self,
        structure: PanelStructure,
        nodes: Sequence[AggregateNode],
        labeler: NodeLabeler,
    ) -> None:
        self.structure = structure
        self.nodes = list(nodes)
        self.labeler = labeler

    def build(self) -> SummationMatrix:
        tree = self.structure.tree
        series = self.structure.series
        ancestors = [series.ancestors(tree, depth) for depth in range(tree.depth + 1)]
        group_matrix = series.group_positions(len(self.structure.catalog))

        s_matrix = np.zeros((len(self.nodes), len(series)), dtype=int)
        for i, node in enumerate(self.nodes):
            s_matrix[i, node_mask(node, ancestors, group_matrix)] = 1

        self._validate(s_matrix)
        row_labels = self.labeler.labels(self.nodes)
        _check_unique_labels(row_labels)

        logger.debug("Built summation matrix of shape %s", s_matrix.shape)
        return SummationMatrix(
            matrix=s_matrix,
            row_labels=row_labels,
            col_labels=self.labeler.series_labels(),
            row_levels=[self.labeler.level_name(node) for node in self.nodes],
        )

    def _validate(self, s_matrix: np.ndarray) -> None:
        """Check the invariants every summation matrix must satisfy.

        Raises:
            InternalConsistencyError: If any invariant fails
        """
        n_bottom = s_matrix.shape[1]
        bottom_rows = [i for i, node in enumerate(self.nodes) if node.is_bottom]

        if len(bottom_rows) != n_bottom:
            raise InternalConsistencyError(
                f"Expected {n_bottom} bottom rows, enumerated {len(bottom_rows)}",
            )

        for i, node in enumerate(self.nodes):
            row = s_matrix[i]
            if node.is_total and not np.all(row == 1):
                raise InternalConsistencyError("Total row of S must be all ones", context={"row": i})
            if not row.any():
                raise InternalConsistencyError(
                    "Aggregate node has no contributing bottom series",
                    context={"row": i},
                )

        for j, i in enumerate(bottom_rows):
            row = s_matrix[i]
            if row.sum() != 1 or row[j] != 1:
                raise InternalConsistencyError(
                    f"Bottom row {i} must have a single 1 at column {j}",
                    context={"row": i, "column": j, "row_sum": int(row.sum())},
                )


def _check_unique_labels(row_labels: Sequence[str]) -> None:
    """Check that no two nodes render the same label.

    Collisions come from the data: a value shared by two group columns, a group
    value equal to a child category, or a category equal to the total label.

    Raises:
        SchemaError: If any label names more than one node
    """
    rows_by_label: dict[str, list[int]] = {}
    for i, label in enumerate(row_labels):
        rows_by_label.setdefault(label, []).append(i)
    collisions = {label: rows for label, rows in rows_by_label.items() if len(rows) > 1}
    if collisions:
        labels = list(collisions)
        raise SchemaError(
            f"Category values produce {len(labels)} ambiguous series labels: {labels[:5]}",
            context={"collisions": dict(list(collisions.items())[:10])},
            fix_hint=(
                "Rename category values so group columns don't share values and don't "
                "repeat child categories or the total label"
            ),
        )


def build_summation_matrix(
    structure: PanelStructure,
    nodes: Sequence[AggregateNode],
    labeler: NodeLabeler,
) -> SummationMatrix:
    """Build S for a node list over a panel structure."""
    return SummationMatrixBuilder(structure, nodes, labeler).build()
