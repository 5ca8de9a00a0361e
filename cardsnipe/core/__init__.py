"""Core data types and constants."""

from .types import (
    AuctionInfo,
    CardIdentity,
    CatalogEntry,
    CatalogProduct,
    CertificateRecord,
    Confidence,
    DealScoreResult,
    GradeAuthority,
    GradeInfo,
    IdentityHints,
    Listing,
    LocalPriceRow,
    NoMatch,
    PriceByTier,
    PriceQuote,
    PriceSource,
    PriceTier,
    ResolutionFailure,
    ResolutionResult,
    SellerInfo,
)

__all__ = [
    "AuctionInfo",
    "CardIdentity",
    "CatalogEntry",
    "CatalogProduct",
    "CertificateRecord",
    "Confidence",
    "DealScoreResult",
    "GradeAuthority",
    "GradeInfo",
    "IdentityHints",
    "Listing",
    "LocalPriceRow",
    "NoMatch",
    "PriceByTier",
    "PriceQuote",
    "PriceSource",
    "PriceTier",
    "ResolutionFailure",
    "ResolutionResult",
    "SellerInfo",
]
