"""Utilities package."""

from .config import ensure_cache_dir, resolve_tesseract_path, settings
from .log import LoggerMixin, configure_logging, get_logger

__all__ = [
    "settings",
    "ensure_cache_dir",
    "resolve_tesseract_path",
    "get_logger",
    "LoggerMixin",
    "configure_logging",
]
