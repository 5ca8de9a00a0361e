"""
Price resolution: the source chain, its sources and their API clients.
"""

from .psa import PSAClient, certificate_from_payload
from .resolver import PriceResolver, resolution_key, summarize_failures
from .sources import (
    ExternalCatalogSource,
    LocalCatalogSource,
    PriceSourceBase,
    ScrapedSalesSource,
    to_catalog_entry,
)
from .sportscardpro import SportsCardProClient, build_query, product_from_payload

__all__ = [
    "ExternalCatalogSource",
    "LocalCatalogSource",
    "PSAClient",
    "PriceResolver",
    "PriceSourceBase",
    "ScrapedSalesSource",
    "SportsCardProClient",
    "build_query",
    "certificate_from_payload",
    "product_from_payload",
    "resolution_key",
    "summarize_failures",
    "to_catalog_entry",
]
