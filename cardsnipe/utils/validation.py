"""
Input validation for listings handed over by the marketplace client and for
paths and URLs supplied through configuration.
"""

import re
from pathlib import Path
from typing import List, Optional, Type, Union

from ..core.types import Listing
from .error_handler import CardSnipeError, ConfigurationError, ParseError


def validate_file_path(file_path: Union[str, Path], must_exist: bool = False) -> Path:
    """
    Validate and normalize a file path.

    Args:
        file_path: File path to validate
        must_exist: Whether the file must already exist

    Returns:
        Normalized Path object

    Raises:
        ConfigurationError: If path is invalid or file doesn't exist when required
    """
    try:
        path = Path(file_path)
        if must_exist and not path.exists():
            raise ConfigurationError(
                f"File does not exist: {path}",
                details={"file_path": str(path), "must_exist": must_exist}
            )
        return path.resolve()
    except ConfigurationError:
        raise
    except (TypeError, ValueError, OSError) as e:
        raise ConfigurationError(
            f"Invalid file path: {file_path}",
            details={"file_path": str(file_path), "error": str(e)}
        ) from e


_URL_PATTERN = re.compile(
    r'^https?://'
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|'
    r'localhost|'
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'
    r'(?::\d{1,5})?'
    r'(?:/?|[/?]\S+)$', re.IGNORECASE)


def validate_url(url: str, allowed_schemes: Optional[List[str]] = None) -> str:
    """
    Validate a URL string.

    Raises:
        ConfigurationError: If URL is invalid or uses a scheme not allowed
    """
    if allowed_schemes is None:
        allowed_schemes = ['http', 'https']

    if not isinstance(url, str) or not _URL_PATTERN.match(url):
        raise ConfigurationError(
            f"Invalid URL format: {url}",
            details={"url": url, "allowed_schemes": allowed_schemes}
        )

    scheme = url.split('://')[0].lower()
    if scheme not in allowed_schemes:
        raise ConfigurationError(
            f"URL scheme '{scheme}' not allowed. Allowed schemes: {allowed_schemes}",
            details={"url": url, "scheme": scheme, "allowed_schemes": allowed_schemes}
        )
    return url


def validate_numeric_range(
    value: Union[int, float],
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    field_name: str = "value",
    error_cls: Type[CardSnipeError] = ConfigurationError,
) -> Union[int, float]:
    """
    Validate a numeric value is within the inclusive range.

    Raises:
        error_cls: If value is outside the allowed range
    """
    details = {"field_name": field_name, "value": value, "min_value": min_value, "max_value": max_value}
    if min_value is not None and value < min_value:
        raise error_cls(f"{field_name} {value} is below minimum {min_value}", details=details)
    if max_value is not None and value > max_value:
        raise error_cls(f"{field_name} {value} is above maximum {max_value}", details=details)
    return value


def validate_listing(listing: Listing) -> Listing:
    """
    Check a marketplace listing before it enters the pipeline.

    Requires a non-empty title, a non-negative price, and, when present,
    a feedback percentage in [0, 100] and non-negative bid count and shipping.

    Raises:
        ParseError: If any check fails
    """
    if not isinstance(listing.title, str) or not listing.title.strip():
        raise ParseError("Listing title must be a non-empty string", details={"item_id": listing.item_id})

    if not isinstance(listing.current_price, (int, float)) or isinstance(listing.current_price, bool):
        raise ParseError(
            "Listing price must be numeric",
            details={"item_id": listing.item_id, "current_price": listing.current_price},
        )
    validate_numeric_range(listing.current_price, min_value=0, field_name="current_price", error_cls=ParseError)

    if listing.seller_feedback_pct is not None:
        validate_numeric_range(
            listing.seller_feedback_pct, 0, 100, field_name="seller_feedback_pct", error_cls=ParseError
        )
    if listing.seller_feedback_count is not None:
        validate_numeric_range(listing.seller_feedback_count, 0, field_name="seller_feedback_count", error_cls=ParseError)
    if listing.bid_count is not None:
        validate_numeric_range(listing.bid_count, 0, field_name="bid_count", error_cls=ParseError)
    if listing.shipping_cost is not None:
        validate_numeric_range(listing.shipping_cost, 0, field_name="shipping_cost", error_cls=ParseError)
    return listing
