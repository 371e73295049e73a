"""Hierarchy and group column specification."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from htskit.core.errors import SpecError


@dataclass(frozen=True)
class HierarchySpec:
    """Hierarchical and grouped structure of a bottom-level panel.

    Hierarchy columns nest strictly, ordered top to bottom (e.g. state, city).
    Group columns are flat and cross the hierarchy at every level
    (e.g. sector). Either list may be empty, but not both.

    Example:
        >>> spec = HierarchySpec(hierarchy=("state", "city"), groups=("sector",))
        >>> spec.columns
        ('state', 'city', 'sector')
    """

    hierarchy: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists (or a lone name) while keeping the dataclass hashable
        for attr in ("hierarchy", "groups"):
            value = getattr(self, attr)
            object.__setattr__(self, attr, (value,) if isinstance(value, str) else tuple(value))
        self._validate()

    def _validate(self) -> None:
        for role, names in (("hierarchy", self.hierarchy), ("groups", self.groups)):
            for name in names:
                if not isinstance(name, str):
                    raise SpecError(
                        f"Column names must be strings, got {type(name).__name__}",
                        context={"role": role, "name": repr(name)},
                    )
                if not name.strip():
                    raise SpecError("Column names must be non-empty", context={"role": role})
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise SpecError(
                    f"Duplicate {role} columns: {duplicates}",
                    context={"role": role, "duplicates": duplicates},
                )

        overlap = sorted(set(self.hierarchy) & set(self.groups))
        if overlap:
            raise SpecError(
                f"Columns appear in both hierarchy and groups: {overlap}",
                context={"overlap": overlap},
            )

        if not self.hierarchy and not self.groups:
            raise SpecError("At least one hierarchy or group column is required")

    @classmethod
    def hierarchical(cls, columns: Iterable[str]) -> HierarchySpec:
        """Spec with only hierarchical columns (no grouping)."""
        return cls(hierarchy=tuple(columns))

    @classmethod
    def grouped(cls, columns: Iterable[str]) -> HierarchySpec:
        """Spec with only grouped columns (no hierarchy)."""
        return cls(groups=tuple(columns))

    @property
    def depth(self) -> int:
        """Number of hierarchy levels below Total."""
        return len(self.hierarchy)

    @property
    def columns(self) -> tuple[str, ...]:
        """All category columns, hierarchy first."""
        return self.hierarchy + self.groups

    def validate_against(self, columns: Iterable[str]) -> None:
        """Check that every named column exists in a dataset schema.

        Raises:
            SpecError: If any hierarchy or group column is absent
        """
        available = list(columns)
        missing = [c for c in self.columns if c not in available]
        if missing:
            raise SpecError(
                f"Columns not found in data: {missing}",
                context={"missing": missing, "available": sorted(map(str, available))},
            )
