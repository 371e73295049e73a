"""Tests for core error types.

Tests the error hierarchy and rich context functionality.
"""

from __future__ import annotations

import pytest

from htskit.core.errors import (
    ERROR_REGISTRY,
    HtsError,
    InconsistentPanelError,
    InternalConsistencyError,
    SchemaError,
    SpecError,
    TimeParseError,
    get_error_class,
)


class TestHtsError:
    """Test base error class."""

    def test_basic_error(self):
        """Basic error creation."""
        err = HtsError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.error_code == "E_UNKNOWN"
        assert err.context == {}

    def test_error_with_context(self):
        """Error with context."""
        context = {"column": "city", "row": 3}
        err = HtsError("Test error", context=context)
        assert err.context == context
        assert "column" in str(err)

    def test_error_with_fix_hint(self):
        """Error with fix hint."""
        err = HtsError("Test error", fix_hint="Rename the column")
        assert err.fix_hint == "Rename the column"
        assert "Rename the column" in str(err)

    def test_error_str_format(self):
        """Error string formatting."""
        err = SpecError("Test message", context={"key": "value"}, fix_hint="Do this")
        err_str = str(err)
        assert err_str.startswith("[E_SPEC_INVALID] Test message")
        assert "key" in err_str
        assert "[hint: Do this]" in err_str

    def test_to_agent_dict(self):
        """Structured dict carries code, message, hint and context."""
        err = SchemaError("Bad rows", context={"column": "gdp"})
        payload = err.to_agent_dict()
        assert payload["error_code"] == "E_SCHEMA_INVALID"
        assert payload["message"] == "Bad rows"
        assert payload["context"] == {"column": "gdp"}
        assert payload["fix_hint"]


class TestErrorClasses:
    """Test the concrete error classes."""

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (SpecError, "E_SPEC_INVALID"),
            (SchemaError, "E_SCHEMA_INVALID"),
            (TimeParseError, "E_TIME_PARSE"),
            (InconsistentPanelError, "E_PANEL_INCONSISTENT"),
            (InternalConsistencyError, "E_INTERNAL_CONSISTENCY"),
        ],
    )
    def test_error_code_and_base(self, error_class, code):
        """Each class has its code and derives from HtsError."""
        err = error_class("boom")
        assert err.error_code == code
        assert isinstance(err, HtsError)
        assert err.fix_hint

    def test_default_hint_can_be_overridden(self):
        """An explicit hint replaces the class default."""
        assert "duplicates='sum'" in InconsistentPanelError("dup").fix_hint
        assert InconsistentPanelError("dup", fix_hint="other").fix_hint == "other"

    def test_catch_by_base(self):
        """All errors can be caught as HtsError."""
        with pytest.raises(HtsError):
            raise TimeParseError("bad period")


class TestErrorRegistry:
    """Test error lookup by code."""

    def test_registry_complete(self):
        """Every error code maps to its class."""
        assert set(ERROR_REGISTRY) == {
            "E_SPEC_INVALID",
            "E_SCHEMA_INVALID",
            "E_TIME_PARSE",
            "E_PANEL_INCONSISTENT",
            "E_INTERNAL_CONSISTENCY",
        }
        for code, error_class in ERROR_REGISTRY.items():
            assert error_class.error_code == code

    def test_get_error_class(self):
        """Lookup returns the class, or the base for unknown codes."""
        assert get_error_class("E_TIME_PARSE") is TimeParseError
        assert get_error_class("E_DOES_NOT_EXIST") is HtsError
