"""Error types for htskit.

Every failure surfaced by ``build`` is one of a small set of error classes,
each carrying a stable error code, a context dict and a fix hint.
"""

# ruff: noqa: N818

from __future__ import annotations

from typing import Any


class HtsError(Exception):
    """Base exception for all htskit errors.

    Attributes:
        error_code: Unique error code string for programmatic handling
        message: Human-readable error message
        context: Additional context data for debugging
        fix_hint: Actionable hint for resolving the error
    """

    error_code: str = "E_UNKNOWN"
    fix_hint: str = ""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        if fix_hint is not None:
            self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f"(context: {self.context})")
        if self.fix_hint:
            parts.append(f"[hint: {self.fix_hint}]")
        return " ".join(parts)

    def to_agent_dict(self) -> dict[str, Any]:
        """Return a structured dict with code, message, hint and context."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "fix_hint": self.fix_hint,
            "context": self.context,
        }


class SpecError(HtsError):
    """Hierarchy/group column specification is invalid."""

    error_code = "E_SPEC_INVALID"
    fix_hint = "Check hierarchy and group column names: non-empty, unique, disjoint and present in the data"


class SchemaError(HtsError):
    """Bottom-level rows do not satisfy the panel schema."""

    error_code = "E_SCHEMA_INVALID"
    fix_hint = "Ensure every category column is non-null and the value column is numeric without NaN"


class TimeParseError(HtsError):
    """Period strings are malformed or mix frequencies."""

    error_code = "E_TIME_PARSE"
    fix_hint = "Use one format for all periods: 'YYYY', 'YYYY Qn', 'YYYY Mnn', 'YYYY Wnn' or 'YYYY-MM-DD'"


class InconsistentPanelError(HtsError):
    """A bottom series reports the same period more than once."""

    error_code = "E_PANEL_INCONSISTENT"
    fix_hint = "Remove duplicate (series, period) rows or build with AggregationConfig(duplicates='sum')"


class InternalConsistencyError(HtsError):
    """Summation structure violates its own invariants (a bug, not bad input)."""

    error_code = "E_INTERNAL_CONSISTENCY"
    fix_hint = "Please report this with the input that triggered it"


ERROR_REGISTRY: dict[str, type[HtsError]] = {
    "E_SPEC_INVALID": SpecError,
    "E_SCHEMA_INVALID": SchemaError,
    "E_TIME_PARSE": TimeParseError,
    "E_PANEL_INCONSISTENT": InconsistentPanelError,
    "E_INTERNAL_CONSISTENCY": InternalConsistencyError,
}


def get_error_class(error_code: str) -> type[HtsError]:
    """Get error class by code."""
    return ERROR_REGISTRY.get(error_code, HtsError)
