"""Hierarchy tree, group catalog and bottom series index.

All three are derived in a single top-to-bottom scan of the bottom-level rows
and record first-seen order. The tree is an arena: nodes are addressed by
integer index and store their parent index and ordered child indices.

Example structure for the panel (state, city) x sector:

    Total                                 node 0
    ├── Rio de Janeiro                    node 1
    │   ├── Rio de Janeiro                node 2
    │   └── Duque de Caxias               node 3
    └── São Paulo                         node 4
        ├── São Paulo                     node 5
        └── Campinas                      node 6
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

import numpy as np

if TYPE_CHECKING:
    from htskit.hierarchy.spec import HierarchySpec

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


class OrderedIndex(Generic[K]):
    """Insertion-ordered registry mapping each key to its first-seen position."""

    def __init__(self) -> None:
        self._positions: dict[K, int] = {}
        self._keys: list[K] = []

    def add(self, key: K) -> int:
        """Register key if new and return its position."""
        position = self._positions.get(key)
        if position is None:
            position = len(self._keys)
            self._positions[key] = position
            self._keys.append(key)
        return position

    def get(self, key: K) -> int | None:
        return self._positions.get(key)

    def position(self, key: K) -> int:
        """Position of a registered key.

        Raises:
            KeyError: If key was never added
        """
        return self._positions[key]

    def __getitem__(self, position: int) -> K:
        return self._keys[position]

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[K]:
        return iter(self._keys)

    @property
    def keys(self) -> tuple[K, ...]:
        return tuple(self._keys)


@dataclass
class TreeNode:
    """One hierarchy prefix; node 0 is the root with an empty path."""

    path: tuple[str, ...]
    parent: int | None
    depth: int
    children: list[int] = field(default_factory=list)


class HierarchyTree:
    """Arena of hierarchy path prefixes in first-seen sibling order."""

    def __init__(self, columns: Sequence[str]) -> None:
        self.columns = tuple(columns)
        self.nodes: list[TreeNode] = [TreeNode(path=(), parent=None, depth=0)]
        self._index: OrderedIndex[tuple[str, ...]] = OrderedIndex()
        self._index.add(())

    @classmethod
    def from_paths(cls, columns: Sequence[str], paths: Iterable[tuple[str, ...]]) -> HierarchyTree:
        tree = cls(columns)
        for path in paths:
            tree.insert(path)
        return tree

    @property
    def depth(self) -> int:
        return len(self.columns)

    def __len__(self) -> int:
        return len(self.nodes)

    def insert(self, path: tuple[str, ...]) -> int:
        """Insert every prefix of a full path and return the leaf index."""
        if len(path) != self.depth:
            raise ValueError(f"Path {path!r} has length {len(path)}, expected {self.depth}")

        node = 0
        for depth in range(1, self.depth + 1):
            prefix = path[:depth]
            child = self._index.get(prefix)
            if child is None:
                child = self._index.add(prefix)
                self.nodes.append(TreeNode(path=prefix, parent=node, depth=depth))
                self.nodes[node].children.append(child)
            node = child
        return node

    def find(self, path: tuple[str, ...]) -> int:
        """Index of the node with this path.

        Raises:
            KeyError: If the path is not in the tree
        """
        return self._index.position(tuple(path))

    def level(self, depth: int) -> list[int]:
        """Node indices at a depth, parent-major then sibling order."""
        if not 0 <= depth <= self.depth:
            raise ValueError(f"depth {depth} is out of range [0, {self.depth}]")
        level = [0]
        for _ in range(depth):
            level = [child for node in level for child in self.nodes[node].children]
        return level

    def ancestor(self, index: int, depth: int) -> int:
        """Ancestor of a node at a shallower (or equal) depth."""
        node = self.nodes[index]
        if depth > node.depth:
            raise ValueError(f"Node {index} at depth {node.depth} has no ancestor at depth {depth}")
        while node.depth > depth:
            index = node.parent  # type: ignore[assignment]
            node = self.nodes[index]
        return index


class GroupCatalog:
    """Distinct values of each group column in first-seen order."""

    def __init__(self, columns: Sequence[str]) -> None:
        self.columns = tuple(columns)
        self._values: list[OrderedIndex[str]] = [OrderedIndex() for _ in self.columns]

    def __len__(self) -> int:
        return len(self.columns)

    def add(self, values: Sequence[str]) -> tuple[int, ...]:
        """Register one row's group values; return their per-column positions."""
        return tuple(index.add(value) for index, value in zip(self._values, values))

    def _column(self, column: int | str) -> int:
        return self.columns.index(column) if isinstance(column, str) else column

    def values(self, column: int | str) -> tuple[str, ...]:
        return self._values[self._column(column)].keys

    def value(self, column: int | str, position: int) -> str:
        return self._values[self._column(column)][position]

    def position(self, column: int | str, value: str) -> int:
        return self._values[self._column(column)].position(value)


@dataclass(frozen=True)
class BottomSeries:
    """A distinct (hierarchy path, group values) combination."""

    path: tuple[str, ...]
    group_values: tuple[str, ...]
    leaf: int
    group_positions: tuple[int, ...]


class BottomSeriesIndex:
    """Bottom series in first-seen order; position is the column in S."""

    def __init__(self) -> None:
        self._index: OrderedIndex[tuple[tuple[str, ...], tuple[str, ...]]] = OrderedIndex()
        self._series: list[BottomSeries] = []

    def add(
        self,
        path: tuple[str, ...],
        group_values: tuple[str, ...],
        leaf: int,
        group_positions: tuple[int, ...],
    ) -> int:
        key = (path, group_values)
        position = self._index.get(key)
        if position is None:
            position = self._index.add(key)
            self._series.append(BottomSeries(path, group_values, leaf, group_positions))
        return position

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[BottomSeries]:
        return iter(self._series)

    def __getitem__(self, position: int) -> BottomSeries:
        return self._series[position]

    def position(self, path: tuple[str, ...], group_values: tuple[str, ...] = ()) -> int:
        return self._index.position((tuple(path), tuple(group_values)))

    def ancestors(self, tree: HierarchyTree, depth: int) -> np.ndarray:
        """Tree index of each series' ancestor at a depth."""
        return np.fromiter(
            (tree.ancestor(s.leaf, depth) for s in self._series),
            dtype=np.int64,
            count=len(self._series),
        )

    def group_positions(self, n_groups: int) -> np.ndarray:
        """Matrix (n_series x n_groups) of catalog positions."""
        if not self._series or n_groups == 0:
            return np.zeros((len(self._series), n_groups), dtype=np.int64)
        return np.array([s.group_positions for s in self._series], dtype=np.int64)


@dataclass(frozen=True)
class PanelStructure:
    """Tree, catalog and series index derived together from one scan.

    Attributes:
        tree: Hierarchy tree over the hierarchy columns
        catalog: Distinct values per group column
        series: Bottom series in first-seen order
        row_series: For each input row, the position of its bottom series
    """

    tree: HierarchyTree
    catalog: GroupCatalog
    series: BottomSeriesIndex
    row_series: np.ndarray

    @classmethod
    def from_rows(
        cls,
        paths: Sequence[tuple[str, ...]],
        group_values: Sequence[tuple[str, ...]],
        spec: HierarchySpec,
    ) -> PanelStructure:
        """Scan rows top to bottom and index the cross-sectional structure.

        Args:
            paths: Hierarchy values per row, ordered as ``spec.hierarchy``
            group_values: Group values per row, ordered as ``spec.groups``
            spec: Validated hierarchy spec
        """
        if len(paths) != len(group_values):
            raise ValueError("paths and group_values must have the same length")

        tree = HierarchyTree(spec.hierarchy)
        catalog = GroupCatalog(spec.groups)
        series = BottomSeriesIndex()
        row_series = np.empty(len(paths), dtype=np.int64)

        for row, (path, groups) in enumerate(zip(paths, group_values)):
            leaf = tree.insert(path)
            positions = catalog.add(groups)
            row_series[row] = series.add(path, groups, leaf, positions)

        logger.debug(
            "Indexed %d rows: %d tree nodes, %d bottom series",
            len(paths),
            len(tree),
            len(series),
        )
        return cls(tree=tree, catalog=catalog, series=series, row_series=row_series)
