"""
Tests for input validation utilities.
"""


import pytest

from cardsnipe.core.types import Listing
from cardsnipe.utils.error_handler import ConfigurationError, ParseError
from cardsnipe.utils.validation import (
    validate_file_path,
    validate_listing,
    validate_numeric_range,
    validate_url,
)


class TestValidateFilePath:
    """Test file path validation."""

    def test_existing_file(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text("[]")

        assert validate_file_path(path, must_exist=True) == path.resolve()

    def test_missing_file_allowed_by_default(self, tmp_path):
        assert validate_file_path(str(tmp_path / "new.db")) == (tmp_path / "new.db").resolve()

    def test_missing_file_required(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_file_path(tmp_path / "missing.json", must_exist=True)
        assert exc_info.value.details["must_exist"] is True

    def test_invalid_path_type(self):
        with pytest.raises(ConfigurationError):
            validate_file_path(None)


class TestValidateUrl:
    """Test URL validation."""

    @pytest.mark.parametrize("url", [
        "https://i.ebayimg.com/images/g/abc/s-l1600.jpg",
        "http://localhost:8080/slab.png",
        "http://127.0.0.1/x",
    ])
    def test_valid_urls(self, url):
        assert validate_url(url) == url

    @pytest.mark.parametrize("url", ["ftp://example.com/file", "not a url", "", None])
    def test_invalid_urls(self, url):
        with pytest.raises(ConfigurationError):
            validate_url(url)

    def test_scheme_restriction(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_url("http://example.com", allowed_schemes=["https"])
        assert exc_info.value.details["scheme"] == "http"


class TestValidateNumericRange:
    def test_within_range(self):
        assert validate_numeric_range(5, 0, 10) == 5

    def test_bounds_inclusive(self):
        assert validate_numeric_range(0, 0, 100) == 0
        assert validate_numeric_range(100, 0, 100) == 100

    def test_outside_range_uses_error_class(self):
        with pytest.raises(ParseError):
            validate_numeric_range(-1, min_value=0, error_cls=ParseError)
        with pytest.raises(ConfigurationError):
            validate_numeric_range(11, max_value=10)


class TestValidateListing:
    """Test marketplace listing validation."""

    def test_valid_listing(self, sample_listing):
        assert validate_listing(sample_listing) is sample_listing

    def test_free_listing_allowed(self):
        validate_listing(Listing(title="2019 Hoops #87", current_price=0))

    @pytest.mark.parametrize("kwargs", [
        {"title": ""},
        {"title": "   "},
        {"current_price": -1.0},
        {"current_price": "40"},
        {"current_price": True},
        {"seller_feedback_pct": 100.5},
        {"seller_feedback_pct": -1},
        {"seller_feedback_count": -3},
        {"bid_count": -1},
        {"shipping_cost": -0.01},
    ])
    def test_invalid_listing(self, kwargs):
        fields = {"title": "2019 Hoops #87", "current_price": 40.0, **kwargs}
        with pytest.raises(ParseError):
            validate_listing(Listing(**fields))
