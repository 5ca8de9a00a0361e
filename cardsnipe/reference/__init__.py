"""Reference catalog of set, parallel, insert and player names."""

from .catalog import (
    PhraseRule,
    ReferenceCatalog,
    SetDefinition,
    load_catalog,
    load_catalog_file,
    normalize_insert,
    normalize_name,
)

__all__ = [
    "PhraseRule",
    "ReferenceCatalog",
    "SetDefinition",
    "load_catalog",
    "load_catalog_file",
    "normalize_insert",
    "normalize_name",
]
