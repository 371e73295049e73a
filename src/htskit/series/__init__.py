"""Bottom-level panel handling."""

from htskit.series.validation import ValidatedPanel, validate_panel, validate_unique_periods

__all__ = [
    "ValidatedPanel",
    "validate_panel",
    "validate_unique_periods",
]
