"""
Storage: the in-memory resolution cache and the SQLite local price catalog.
"""

from .cache import ResolutionCache
from .price_catalog import LocalPriceCatalog, load_rows_file, row_from_mapping

__all__ = [
    "LocalPriceCatalog",
    "ResolutionCache",
    "load_rows_file",
    "row_from_mapping",
]
