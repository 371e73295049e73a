"""Enumeration of aggregate nodes.

For each hierarchy depth 0..K the enumerator emits the pure hierarchy nodes,
then the hierarchy nodes crossed with group values. With two hierarchy levels
(state, city) and one group column (sector) the order is:

    Total
    Total x sector
    state
    state x sector
    city
    city x sector        <- bottom series, one per column of S

Nodes reference the tree and the group catalog by integer index only; labels
are rendered on demand by ``NodeLabeler``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from itertools import combinations

import numpy as np

from htskit.core.config import GroupMode
from htskit.hierarchy.tree import PanelStructure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateNode:
    """A hierarchy prefix optionally constrained to group values.

    Attributes:
        tree_node: Index of the hierarchy node in the tree arena
        depth: Depth of that hierarchy node (0 = Total)
        groups: (group column position, catalog value position) pairs
        is_bottom: True for nodes that identify exactly one bottom series
    """

    tree_node: int
    depth: int
    groups: tuple[tuple[int, int], ...] = ()
    is_bottom: bool = False

    @property
    def group_columns(self) -> tuple[int, ...]:
        return tuple(column for column, _ in self.groups)

    @property
    def is_total(self) -> bool:
        return self.depth == 0 and not self.groups


class LevelEnumerator:
    """Produces the ordered AggregateNode list for a panel structure.

    Args:
        structure: Tree, catalog and bottom series of the panel
        group_mode: 'separate' crosses each group column with the hierarchy on
            its own; 'crossed' crosses every non-empty subset of group columns
    """

    def __init__(self, structure: PanelStructure, group_mode: GroupMode = "separate") -> None:
        self.structure = structure
        self.group_mode = group_mode

    def group_combinations(self) -> list[tuple[int, ...]]:
        """Group column subsets crossed with the hierarchy, in emission order."""
        n_groups = len(self.structure.catalog)
        if n_groups == 0:
            return []
        if self.group_mode == "separate":
            return [(column,) for column in range(n_groups)]
        return [
            combo
            for size in range(1, n_groups + 1)
            for combo in combinations(range(n_groups), size)
        ]

    def enumerate(self) -> list[AggregateNode]:
        tree = self.structure.tree
        n_groups = len(self.structure.catalog)
        all_groups = tuple(range(n_groups))
        group_matrix = self.structure.series.group_positions(n_groups)
        combos = self.group_combinations()

        nodes: list[AggregateNode] = []
        for depth in range(tree.depth + 1):
            level = tree.level(depth)
            at_bottom = depth == tree.depth

            # Without groups the leaves are the bottom series themselves
            if not (at_bottom and n_groups == 0):
                nodes.extend(AggregateNode(tree_node=t, depth=depth) for t in level)

            if n_groups:
                ancestors = self.structure.series.ancestors(tree, depth)
                for combo in combos:
                    if at_bottom and combo == all_groups:
                        continue
                    nodes.extend(self._grouped_block(level, depth, combo, ancestors, group_matrix))

            if at_bottom:
                nodes.extend(self._bottom_block())

        logger.debug(
            "Enumerated %d aggregate nodes over depth %d and %d group columns (%s)",
            len(nodes),
            tree.depth,
            n_groups,
            self.group_mode,
        )
        return nodes

    def _grouped_block(
        self,
        level: Sequence[int],
        depth: int,
        combo: tuple[int, ...],
        ancestors: np.ndarray,
        group_matrix: np.ndarray,
    ) -> Iterator[AggregateNode]:
        # Only combinations backed by at least one bottom series are emitted
        observed: dict[int, set[tuple[int, ...]]] = {}
        projected = group_matrix[:, list(combo)]
        for ancestor, values in zip(ancestors.tolist(), projected.tolist()):
            observed.setdefault(ancestor, set()).add(tuple(values))

        for tree_node in level:
            for values in sorted(observed.get(tree_node, ())):
                yield AggregateNode(
                    tree_node=tree_node,
                    depth=depth,
                    groups=tuple(zip(combo, values)),
                )

    def _bottom_block(self) -> Iterator[AggregateNode]:
        depth = self.structure.tree.depth
        for series in self.structure.series:
            yield AggregateNode(
                tree_node=series.leaf,
                depth=depth,
                groups=tuple(enumerate(series.group_positions)),
                is_bottom=True,
            )


def enumerate_nodes(
    structure: PanelStructure,
    group_mode: GroupMode = "separate",
) -> list[AggregateNode]:
    """Ordered aggregate nodes of a panel structure."""
    return LevelEnumerator(structure, group_mode).enumerate()


class NodeLabeler:
    """Renders labels and category values of aggregate nodes from indices."""

    def __init__(
        self,
        structure: PanelStructure,
        separator: str = "/",
        total_label: str = "Total",
    ) -> None:
        self.structure = structure
        self.separator = separator
        self.total_label = total_label

    def label(self, node: AggregateNode) -> str:
        """Path segments then group values, joined by the separator.

        The root with no group set is rendered as the total label.
        """
        catalog = self.structure.catalog
        parts = list(self.structure.tree.nodes[node.tree_node].path)
        parts.extend(catalog.value(column, value) for column, value in node.groups)
        return self.separator.join(parts) if parts else self.total_label

    def labels(self, nodes: Sequence[AggregateNode]) -> list[str]:
        return [self.label(node) for node in nodes]

    def series_labels(self) -> list[str]:
        """Labels of the bottom series in column order."""
        return [
            self.separator.join(series.path + series.group_values)
            for series in self.structure.series
        ]

    def level_name(self, node: AggregateNode) -> str:
        """Name of the aggregation level a node belongs to, e.g. 'state/sector'."""
        names = list(self.structure.tree.columns[: node.depth])
        names.extend(self.structure.catalog.columns[column] for column in node.group_columns)
        return self.separator.join(names) if names else self.total_label

    def category_values(self, node: AggregateNode, marker: str) -> dict[str, str]:
        """Value of every category column, with ``marker`` where the node is free."""
        tree = self.structure.tree
        catalog = self.structure.catalog
        path = tree.nodes[node.tree_node].path

        values = {
            column: path[i] if i < node.depth else marker
            for i, column in enumerate(tree.columns)
        }
        fixed = dict(node.groups)
        for column_position, column in enumerate(catalog.columns):
            if column_position in fixed:
                values[column] = catalog.value(column_position, fixed[column_position])
            else:
                values[column] = marker
        return values
