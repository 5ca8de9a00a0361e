from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class GradeAuthority(str, Enum):
    PSA = "PSA"
    BGS = "BGS"
    SGC = "SGC"
    CGC = "CGC"
    RAW = "raw"


class PriceTier(str, Enum):
    LOOSE = "loose"
    GRADE_8 = "grade8"
    GRADE_9 = "grade9"
    GRADE_10 = "grade10"


class Confidence(str, Enum):
    NONE = "none"
    HIGH = "high"
    VERY_HIGH = "very-high"


class PriceSource(str, Enum):
    CERTIFICATE_AUTHORITY = "certificate-authority"
    LOCAL_CATALOG = "local-catalog"
    EXTERNAL_CATALOG_API = "external-catalog-api"
    SCRAPED_SALES = "scraped-sales"


class ResolutionFailure(str, Enum):
    INSUFFICIENT_IDENTITY = "insufficient-identity"
    NO_CANDIDATE_MATCH = "no-candidate-match"
    NO_PRICE_DATA = "no-price-data"
    SOURCE_UNAVAILABLE = "source-unavailable"


REQUIRED_IDENTITY_FIELDS = ("year", "set_name", "card_number")


@dataclass(frozen=True)
class CardIdentity:
    """Identity of one printed card. Any field may be None on a partial identity.

    ``parallel=None`` is the base card. ``player`` is carried for query
    building and display only and never takes part in matching.
    """
    sport: Optional[str] = None
    year: Optional[int] = None
    set_name: Optional[str] = None
    card_number: Optional[str] = None
    insert_line: Optional[str] = None
    parallel: Optional[str] = None
    is_autograph: Optional[bool] = None
    player: Optional[str] = None

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_IDENTITY_FIELDS if getattr(self, name) is None]

    @property
    def is_sufficient(self) -> bool:
        return not self.missing_required()

    def cache_key(self) -> Tuple[Any, ...]:
        """Normalized identity tuple used as the resolution cache key."""
        def norm(value):
            return value.strip().lower() if isinstance(value, str) else value

        return (
            norm(self.sport),
            self.year,
            norm(self.set_name),
            norm(self.card_number),
            norm(self.insert_line),
            norm(self.parallel),
            bool(self.is_autograph),
        )

    def describe(self) -> str:
        parts = [str(self.year) if self.year else None, self.set_name]
        if self.insert_line:
            parts.append(self.insert_line)
        if self.player:
            parts.append(self.player)
        parts.append(f"#{self.card_number}" if self.card_number else None)
        parts.append(self.parallel or "base")
        if self.is_autograph:
            parts.append("auto")
        return " ".join(p for p in parts if p)


@dataclass(frozen=True)
class GradeInfo:
    authority: GradeAuthority = GradeAuthority.RAW
    numeric_grade: Optional[float] = None
    is_gem: bool = False

    @classmethod
    def raw(cls) -> "GradeInfo":
        return cls()

    @property
    def is_graded(self) -> bool:
        return self.authority is not GradeAuthority.RAW and self.numeric_grade is not None

    def cache_key(self) -> Tuple[Any, ...]:
        return (self.authority.value, self.numeric_grade, self.is_gem)

    @property
    def label(self) -> str:
        if not self.is_graded:
            return "Raw"
        grade = self.numeric_grade
        text = str(int(grade)) if float(grade).is_integer() else str(grade)
        return f"{self.authority.value} {text}"


@dataclass(frozen=True)
class PriceByTier:
    """Prices in cents, one column per grade bucket."""
    loose: Optional[int] = None
    grade8: Optional[int] = None
    grade9: Optional[int] = None
    grade10: Optional[int] = None

    def get(self, tier: PriceTier) -> Optional[int]:
        return getattr(self, tier.value)


@dataclass(frozen=True)
class CatalogEntry:
    console_name: str
    product_name: str
    parsed_identity: CardIdentity
    price_by_tier: PriceByTier
    product_url: Optional[str] = None


@dataclass(frozen=True)
class CatalogProduct:
    """One ranked result from the external catalog API."""
    console_name: str
    product_name: str
    price_by_tier: PriceByTier
    product_url: Optional[str] = None
    product_id: Optional[str] = None


@dataclass(frozen=True)
class LocalPriceRow:
    year: int
    set_name: str
    card_number: str
    sport: Optional[str]
    price_by_tier: PriceByTier
    parallel: Optional[str] = None
    insert_line: Optional[str] = None
    is_autograph: bool = False
    console_name: Optional[str] = None
    product_name: Optional[str] = None
    player: Optional[str] = None

    def to_identity(self) -> CardIdentity:
        return CardIdentity(
            sport=self.sport,
            year=self.year,
            set_name=self.set_name,
            card_number=self.card_number,
            insert_line=self.insert_line,
            parallel=self.parallel,
            is_autograph=self.is_autograph,
            player=self.player,
        )


@dataclass(frozen=True)
class CertificateRecord:
    """Parsed grading-authority certificate lookup."""
    cert_number: str
    year: Optional[int] = None
    set_name: Optional[str] = None
    player: Optional[str] = None
    card_number: Optional[str] = None
    numeric_grade: Optional[float] = None
    variety: Optional[str] = None
    parallel: Optional[str] = None
    authority: GradeAuthority = GradeAuthority.PSA
    grade_description: Optional[str] = None


@dataclass(frozen=True)
class PriceQuote:
    value: float
    source: PriceSource
    matched_identity_description: str
    confidence: Confidence
    price_tier: PriceTier = PriceTier.LOOSE
    source_url: Optional[str] = None
    sample_size: Optional[int] = None


@dataclass(frozen=True)
class NoMatch:
    reason: ResolutionFailure
    detail: str = ""


@dataclass(frozen=True)
class ResolutionResult:
    identity: CardIdentity
    grade: GradeInfo
    quote: Optional[PriceQuote]
    reason: Optional[ResolutionFailure] = None
    confidence: Confidence = Confidence.NONE
    detail: str = ""

    @property
    def resolved(self) -> bool:
        return self.quote is not None


@dataclass(frozen=True)
class DealScoreResult:
    score: int
    resolution: ResolutionResult
    adjustments: Tuple[Tuple[str, int], ...] = ()
    is_actionable: bool = False
    listing_id: Optional[str] = None


@dataclass(frozen=True)
class AuctionInfo:
    ends_at: datetime
    bid_count: int = 0


@dataclass(frozen=True)
class SellerInfo:
    feedback_pct: Optional[float] = None
    feedback_count: Optional[int] = None


@dataclass
class Listing:
    """Marketplace listing as handed over by the marketplace client."""
    title: str
    current_price: float
    structured_aspects: Dict[str, str] = field(default_factory=dict)
    certificate_number: Optional[str] = None
    image_url: Optional[str] = None
    is_auction: bool = False
    auction_end_time: Optional[datetime] = None
    bid_count: Optional[int] = None
    seller_feedback_pct: Optional[float] = None
    seller_feedback_count: Optional[int] = None
    shipping_cost: Optional[float] = None
    item_id: Optional[str] = None

    @property
    def auction(self) -> Optional[AuctionInfo]:
        if not self.is_auction or self.auction_end_time is None:
            return None
        return AuctionInfo(ends_at=self.auction_end_time, bid_count=self.bid_count or 0)

    @property
    def seller(self) -> Optional[SellerInfo]:
        if self.seller_feedback_pct is None and self.seller_feedback_count is None:
            return None
        return SellerInfo(
            feedback_pct=self.seller_feedback_pct,
            feedback_count=self.seller_feedback_count,
        )


@dataclass(frozen=True)
class IdentityHints:
    """Caller-supplied context for one listing.

    Pre-fetched certificate lookups short-circuit the pipeline's own calls.
    """
    sport: Optional[str] = None
    player: Optional[str] = None
    certificate_lookup: Optional[CertificateRecord] = None
    ocr_certificate_lookup: Optional[CertificateRecord] = None
