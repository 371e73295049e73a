"""Tests for the aggregation engine."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from htskit.hierarchy import (
    AggregationEngine,
    HierarchySpec,
    NodeLabeler,
    PanelStructure,
    build_summation_matrix,
    enumerate_nodes,
)
from htskit.time import TimeIndex


def _engine(df: pd.DataFrame, hierarchy: list[str], groups: list[str], time_col: str, value_col: str):
    spec = HierarchySpec(hierarchy=hierarchy, groups=groups)
    paths = list(zip(*(df[c] for c in hierarchy))) if hierarchy else [()] * len(df)
    group_values = list(zip(*(df[c] for c in groups))) if groups else [()] * len(df)
    structure = PanelStructure.from_rows(paths, group_values, spec)
    nodes = enumerate_nodes(structure)
    labeler = NodeLabeler(structure)
    summation = build_summation_matrix(structure, nodes, labeler)
    engine = AggregationEngine(
        structure,
        nodes,
        TimeIndex.from_values(df[time_col].tolist()),
        df[value_col].to_numpy(dtype=float),
        summation=summation,
    )
    return engine, labeler


@pytest.fixture
def gdp_engine(gdp_panel):
    return _engine(gdp_panel, ["state", "city"], ["sector"], "quarter", "gdp")


@pytest.fixture
def store_engine(store_panel):
    return _engine(store_panel, ["region", "store"], [], "month", "sales")


class TestBottomMatrix:
    """Test the dense bottom matrix."""

    def test_shape_and_values(self, gdp_engine) -> None:
        engine, _ = gdp_engine
        b_matrix, counts = engine.bottom_matrix()
        assert b_matrix.shape == (8, 2)
        assert b_matrix[:, 0].tolist() == [1500, 270, 2800, 500, 2300, 350, 3100, 700]
        assert np.all(counts == 1)

    def test_missing_cells_are_zero(self, store_engine) -> None:
        """B2 has no 2024 M02 row: value 0, count 0."""
        engine, _ = store_engine
        b_matrix, counts = engine.bottom_matrix()
        assert b_matrix[3, 1] == 0.0
        assert counts[3, 1] == 0
        assert counts.sum() == 7


class TestAggregate:
    """Test both aggregation strategies."""

    def test_matrix_totals(self, gdp_engine) -> None:
        engine, labeler = gdp_engine
        result = engine.aggregate("matrix")
        labels = labeler.labels(engine.nodes)

        assert result.values.shape == (21, 2)
        assert result.values[labels.index("Total")].tolist() == [11520.0, 12320.0]
        assert result.values[labels.index("Industry"), 1] == 5500.0
        assert result.values[labels.index("Agriculture"), 0] == 6450.0
        assert result.values[labels.index("Rio de Janeiro"), 0] == 4420.0
        assert result.values[labels.index("São Paulo"), 0] == 7100.0

    def test_strategies_agree(self, gdp_engine) -> None:
        """S @ B and direct row selection yield the same table."""
        engine, _ = gdp_engine
        by_matrix = engine.aggregate("matrix")
        direct = engine.aggregate("direct")
        np.testing.assert_array_equal(by_matrix.values, direct.values)
        np.testing.assert_array_equal(by_matrix.counts, direct.counts)

    def test_strategies_agree_with_gaps(self, store_engine) -> None:
        engine, _ = store_engine
        np.testing.assert_array_equal(
            engine.aggregate("matrix").counts,
            engine.aggregate("direct").counts,
        )

    def test_parent_equals_sum_of_children(self, gdp_engine) -> None:
        """Each state is the sum of its cities in every period."""
        engine, labeler = gdp_engine
        values = engine.aggregate().values
        labels = labeler.labels(engine.nodes)
        for state, cities in {
            "Rio de Janeiro": ["Rio de Janeiro", "Duque de Caxias"],
            "São Paulo": ["São Paulo", "Campinas"],
        }.items():
            children = [labels.index(f"{state}/{city}") for city in cities]
            np.testing.assert_array_equal(values[labels.index(state)], values[children].sum(axis=0))

    def test_unknown_strategy(self, gdp_engine) -> None:
        engine, _ = gdp_engine
        with pytest.raises(ValueError, match="Unknown aggregation strategy"):
            engine.aggregate("sparse")

    def test_matrix_requires_summation(self, store_panel) -> None:
        engine, _ = _engine(store_panel, ["region", "store"], [], "month", "sales")
        engine.summation = None
        with pytest.raises(ValueError, match="requires a summation matrix"):
            engine.aggregate("matrix")
        assert engine.aggregate("direct").values.shape == (7, 2)

    def test_misaligned_inputs(self, store_engine) -> None:
        engine, _ = store_engine
        with pytest.raises(ValueError, match="one entry per indexed row"):
            AggregationEngine(engine.structure, engine.nodes, engine.time_index, np.zeros(3))


class TestToFrame:
    """Test the long-form output table."""

    def test_absent_cells_are_omitted(self, store_engine) -> None:
        """Only (node, period) cells with contributing rows are emitted."""
        engine, labeler = store_engine
        table = engine.to_frame(engine.aggregate(), labeler, "month", "sales", "<aggregated>")

        assert len(table) == 13
        assert list(table.columns) == ["region", "store", "month", "sales"]
        b2 = table[table["store"] == "B2"]
        assert b2["month"].tolist() == ["2024 M01"]

        south = table[(table["region"] == "South") & (table["store"] == "<aggregated>")]
        assert south["sales"].tolist() == [70.0, 31.0]

        total = table[table["region"] == "<aggregated>"]
        assert total["sales"].tolist() == [100.0, 63.0]

    def test_row_order(self, store_engine) -> None:
        """Node enumeration order, then ascending period."""
        engine, labeler = store_engine
        table = engine.to_frame(
            engine.aggregate(), labeler, "month", "sales", "<aggregated>", with_labels=True
        )
        assert table["unique_id"].tolist()[:6] == [
            "Total", "Total", "North", "North", "South", "South",
        ]
        assert table["month"].tolist()[:2] == ["2024 M01", "2024 M02"]

    def test_custom_id_col(self, store_engine) -> None:
        engine, labeler = store_engine
        table = engine.to_frame(
            engine.aggregate(), labeler, "month", "sales", "*", with_labels=True, id_col="series"
        )
        assert table.columns[0] == "series"
        assert table.loc[0, "region"] == "*"
