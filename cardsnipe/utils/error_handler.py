"""
Centralized error handling for the card deal scanner.

This module provides custom exception classes and error handling utilities
used at the boundaries where collaborator failures are converted into
explicit, recoverable outcomes.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass


class CardSnipeError(Exception):
    """Base exception class for all scanner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CardSnipeError):
    """Raised when there are configuration or environment variable issues."""
    pass


class CatalogLoadError(ConfigurationError):
    """Raised when the reference catalog cannot be loaded at start-up."""
    pass


class ParseError(CardSnipeError):
    """Raised when a collaborator payload cannot be parsed."""
    pass


class CacheError(CardSnipeError):
    """Raised when cache or local price storage operations fail."""
    pass


class NetworkError(CardSnipeError):
    """Raised when network requests fail."""
    pass


class SourceUnavailableError(NetworkError):
    """Raised by a collaborator client when its service cannot answer."""
    pass


class OCRError(CardSnipeError):
    """Raised when OCR processing fails or produces invalid results."""
    pass


@dataclass
class ErrorContext:
    """Context information for error reporting."""
    operation: str
    module: str
    function: str
    input_data: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None


def validate_required_fields(data: Dict[str, Any], required_fields: list, context: ErrorContext) -> None:
    """
    Validate that required fields are present in data.

    Args:
        data: Dictionary to validate
        required_fields: List of required field names
        context: Error context for reporting

    Raises:
        ParseError: If required fields are missing
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None]

    if missing_fields:
        raise ParseError(
            f"Missing required fields: {missing_fields}",
            details={
                "missing_fields": missing_fields,
                "available_fields": list(data.keys()),
                "operation": context.operation,
            }
        )
