"""Hierarchical and grouped structure of bottom-level panels.

This module derives the hierarchy tree and group catalog from category
columns, enumerates every aggregate node, builds the summation matrix S and
sums bottom-level values up to every node.

Example:
    >>> from htskit.hierarchy import HierarchySpec, PanelStructure
    >>> from htskit.hierarchy import NodeLabeler, enumerate_nodes, build_summation_matrix
    >>>
    >>> spec = HierarchySpec(hierarchy=("state", "city"), groups=("sector",))
    >>> structure = PanelStructure.from_rows(paths, group_values, spec)
    >>> nodes = enumerate_nodes(structure)
    >>> s = build_summation_matrix(structure, nodes, NodeLabeler(structure))
"""

from __future__ import annotations

from .aggregation import AggregatedValues, AggregationEngine
from .levels import AggregateNode, LevelEnumerator, NodeLabeler, enumerate_nodes
from .spec import HierarchySpec
from .structure import SummationMatrix, SummationMatrixBuilder, build_summation_matrix
from .tree import (
    BottomSeries,
    BottomSeriesIndex,
    GroupCatalog,
    HierarchyTree,
    OrderedIndex,
    PanelStructure,
)

__all__ = [
    # Spec
    "HierarchySpec",
    # Structure
    "OrderedIndex",
    "HierarchyTree",
    "GroupCatalog",
    "BottomSeries",
    "BottomSeriesIndex",
    "PanelStructure",
    # Enumeration
    "AggregateNode",
    "LevelEnumerator",
    "NodeLabeler",
    "enumerate_nodes",
    # Summation matrix
    "SummationMatrix",
    "SummationMatrixBuilder",
    "build_summation_matrix",
    # Aggregation
    "AggregationEngine",
    "AggregatedValues",
]
