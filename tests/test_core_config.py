"""Tests for AggregationConfig.

Tests configuration validation, presets, and defaults.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from htskit import AggregationConfig


class TestAggregationConfigValidation:
    """Test config validation."""

    def test_valid_config(self):
        """Create valid config."""
        config = AggregationConfig(separator="|", total_label="Brazil")
        assert config.separator == "|"
        assert config.total_label == "Brazil"

    def test_separator_single_character(self):
        """separator must be exactly one character."""
        with pytest.raises(ValidationError, match="single non-whitespace character"):
            AggregationConfig(separator="::")

    def test_separator_not_whitespace(self):
        """separator cannot be whitespace."""
        with pytest.raises(ValidationError, match="single non-whitespace character"):
            AggregationConfig(separator=" ")

    def test_total_label_without_separator(self):
        """total_label must not contain the separator."""
        with pytest.raises(ValidationError, match="total_label must not contain"):
            AggregationConfig(total_label="All/Total")

    def test_empty_marker(self):
        """aggregated_marker cannot be empty."""
        with pytest.raises(ValidationError):
            AggregationConfig(aggregated_marker="")

    def test_unknown_option(self):
        """Unknown fields are rejected."""
        with pytest.raises(ValidationError):
            AggregationConfig(reconcile=True)

    def test_literal_choices(self):
        """Enumerated options only accept their documented values."""
        with pytest.raises(ValidationError):
            AggregationConfig(group_mode="nested")
        with pytest.raises(ValidationError):
            AggregationConfig(duplicates="mean")
        with pytest.raises(ValidationError):
            AggregationConfig(strategy="sparse")

    def test_frozen(self):
        """Config is immutable."""
        config = AggregationConfig()
        with pytest.raises(ValidationError):
            config.separator = "|"


class TestAggregationConfigDefaults:
    """Test config defaults."""

    def test_defaults(self):
        """Default labelling and behavior."""
        config = AggregationConfig()
        assert config.separator == "/"
        assert config.total_label == "Total"
        assert config.aggregated_marker == "<aggregated>"
        assert config.group_mode == "separate"
        assert config.duplicates == "reject"
        assert config.strategy == "matrix"


class TestAggregationConfigPresets:
    """Test preset constructors."""

    def test_strict(self):
        config = AggregationConfig.strict()
        assert config.duplicates == "reject"
        assert config.strategy == "matrix"

    def test_lenient(self):
        """lenient() sums duplicate rows."""
        config = AggregationConfig.lenient()
        assert config.duplicates == "sum"

    def test_model_copy(self):
        """Presets can be adjusted with model_copy."""
        config = AggregationConfig.lenient().model_copy(update={"strategy": "direct"})
        assert config.duplicates == "sum"
        assert config.strategy == "direct"
