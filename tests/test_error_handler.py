"""
Tests for the error handling utilities.

Covers the exception hierarchy and required-field validation.
"""

import pytest

from cardsnipe.utils.error_handler import (
    CacheError,
    CardSnipeError,
    CatalogLoadError,
    ConfigurationError,
    ErrorContext,
    NetworkError,
    OCRError,
    ParseError,
    SourceUnavailableError,
    validate_required_fields,
)


class TestCardSnipeError:
    """Test the base exception class and its subclasses."""

    def test_base_exception_creation(self):
        error = CardSnipeError("Test error message")
        assert str(error) == "Test error message"
        assert error.details == {}

    def test_exception_with_details(self):
        error = CardSnipeError("Lookup failed", {"status": 503})
        assert str(error) == "Lookup failed | Details: {'status': 503}"

    def test_exception_inheritance(self):
        for exc_class in (
            ConfigurationError,
            CatalogLoadError,
            ParseError,
            CacheError,
            NetworkError,
            SourceUnavailableError,
            OCRError,
        ):
            assert issubclass(exc_class, CardSnipeError)

    def test_specialised_hierarchy(self):
        assert issubclass(CatalogLoadError, ConfigurationError)
        assert issubclass(SourceUnavailableError, NetworkError)


class TestValidateRequiredFields:
    """Test required-field validation."""

    def test_passes_when_present(self):
        context = ErrorContext("parse", "psa", "certificate_from_payload")
        validate_required_fields({"CertNumber": "1"}, ["CertNumber"], context)

    def test_missing_and_none_fields_raise(self):
        context = ErrorContext("parse", "psa", "certificate_from_payload")

        with pytest.raises(ParseError) as exc_info:
            validate_required_fields(
                {"CertNumber": None, "Year": "2019"}, ["CertNumber", "Brand"], context
            )

        assert exc_info.value.details["missing_fields"] == ["CertNumber", "Brand"]
        assert exc_info.value.details["operation"] == "parse"
