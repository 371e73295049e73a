"""Tests for hierarchy spec validation."""

from __future__ import annotations

import pytest

from htskit.core.errors import SpecError
from htskit.hierarchy import HierarchySpec


class TestHierarchySpec:
    """Test HierarchySpec creation and validation."""

    def test_basic_creation(self) -> None:
        """Lists are normalized to tuples."""
        spec = HierarchySpec(hierarchy=["state", "city"], groups=["sector"])
        assert spec.hierarchy == ("state", "city")
        assert spec.groups == ("sector",)
        assert spec.columns == ("state", "city", "sector")
        assert spec.depth == 2

    def test_single_name(self) -> None:
        """A lone string is one column, not a sequence of characters."""
        spec = HierarchySpec(hierarchy="state")
        assert spec.hierarchy == ("state",)

    def test_hierarchical_constructor(self) -> None:
        """hierarchical() builds a spec without groups."""
        spec = HierarchySpec.hierarchical(["region", "store"])
        assert spec.hierarchy == ("region", "store")
        assert spec.groups == ()

    def test_grouped_constructor(self) -> None:
        """grouped() builds a spec without hierarchy."""
        spec = HierarchySpec.grouped(["product", "channel"])
        assert spec.hierarchy == ()
        assert spec.groups == ("product", "channel")
        assert spec.depth == 0

    def test_overlap(self) -> None:
        """A column cannot be both hierarchy and group."""
        with pytest.raises(SpecError, match="both hierarchy and groups"):
            HierarchySpec(hierarchy=["state", "city"], groups=["city"])

    def test_duplicate_hierarchy(self) -> None:
        """Duplicate hierarchy columns are rejected."""
        with pytest.raises(SpecError, match="Duplicate hierarchy columns"):
            HierarchySpec(hierarchy=["state", "state"])

    def test_duplicate_groups(self) -> None:
        """Duplicate group columns are rejected."""
        with pytest.raises(SpecError, match="Duplicate groups columns"):
            HierarchySpec(hierarchy=["state"], groups=["sector", "sector"])

    def test_empty_name(self) -> None:
        """Empty or blank names are rejected."""
        with pytest.raises(SpecError, match="non-empty"):
            HierarchySpec(hierarchy=["state", " "])

    def test_non_string_name(self) -> None:
        """Names must be strings."""
        with pytest.raises(SpecError, match="must be strings"):
            HierarchySpec(hierarchy=["state", 3])

    def test_nothing_to_aggregate(self) -> None:
        """At least one column is required."""
        with pytest.raises(SpecError, match="At least one"):
            HierarchySpec()

    def test_validate_against(self) -> None:
        """Columns absent from the data are reported."""
        spec = HierarchySpec(hierarchy=["state", "city"], groups=["sector"])
        spec.validate_against(["state", "city", "sector", "gdp"])

        with pytest.raises(SpecError, match="not found in data") as exc_info:
            spec.validate_against(["state", "gdp"])
        assert exc_info.value.context["missing"] == ["city", "sector"]

    def test_hashable(self) -> None:
        """Specs are frozen and hashable."""
        assert hash(HierarchySpec(hierarchy=["a"])) == hash(HierarchySpec(hierarchy=("a",)))
