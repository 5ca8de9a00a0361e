"""Price sources tried by the resolver, in chain order.

Each source returns a PriceQuote or a NoMatch for the identity it was
given. Collaborator failures are raised, not returned; the resolver turns
them into ``source-unavailable``.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

from ..core.constants import EXTERNAL_CANDIDATE_LIMIT
from ..core.types import (
    CardIdentity,
    CatalogEntry,
    CatalogProduct,
    Confidence,
    GradeInfo,
    NoMatch,
    PriceByTier,
    PriceQuote,
    PriceSource,
    ResolutionFailure,
)
from ..match.nearest import nearest_candidate
from ..match.predicates import failed_rules, identities_match
from ..parse.grade import parse_grade
from ..parse.title import parse_catalog_product, parse_title
from ..pricing.sold_sales import Sales130PointClient, trimmed_mean
from ..pricing.tiers import price_for_grade, select_tier
from ..reference.catalog import ReferenceCatalog
from ..store.price_catalog import LocalPriceCatalog
from ..utils.log import LoggerMixin
from .sportscardpro import SportsCardProClient, build_query

SourceOutcome = Union[PriceQuote, NoMatch]


class PriceSourceBase(ABC, LoggerMixin):
    """One link of the price chain."""

    source: PriceSource

    @abstractmethod
    async def lookup(self, identity: CardIdentity, grade: GradeInfo) -> SourceOutcome:
        """Resolve a price for the identity and grade."""

    def _no_candidate(self, identity: CardIdentity, candidates: Sequence[CardIdentity]) -> NoMatch:
        nearest = nearest_candidate(identity, candidates)
        if nearest is not None:
            candidate, similarity = nearest
            self.logger.info(
                "No candidate passed strict matching",
                source=self.source.value,
                candidates=len(candidates),
                nearest=candidate.describe(),
                similarity=round(similarity, 1),
                failed_rules=failed_rules(identity, candidate, getattr(self, "catalog", None)),
            )
        return NoMatch(
            ResolutionFailure.NO_CANDIDATE_MATCH,
            f"{len(candidates)} candidate(s) from {self.source.value}, none matched",
        )

    def _quote(
        self,
        prices: PriceByTier,
        grade: GradeInfo,
        matched: CardIdentity,
        source_url: Optional[str] = None,
    ) -> SourceOutcome:
        priced = price_for_grade(prices, grade)
        if priced is None:
            return NoMatch(ResolutionFailure.NO_PRICE_DATA, f"{matched.describe()} has no usable price")
        tier, value = priced
        return PriceQuote(
            value=value,
            source=self.source,
            matched_identity_description=matched.describe(),
            confidence=Confidence.HIGH,
            price_tier=tier,
            source_url=source_url,
        )


class LocalCatalogSource(PriceSourceBase):
    """Local SQLite price catalog; skipped while it holds no rows."""

    source = PriceSource.LOCAL_CATALOG

    def __init__(self, store: LocalPriceCatalog, catalog: ReferenceCatalog):
        self.store = store
        self.catalog = catalog

    async def lookup(self, identity: CardIdentity, grade: GradeInfo) -> SourceOutcome:
        if not await asyncio.to_thread(self.store.has_data):
            return NoMatch(ResolutionFailure.SOURCE_UNAVAILABLE, "local price catalog is empty")

        rows = await asyncio.to_thread(self.store.find_candidates, identity)
        candidates = [row.to_identity() for row in rows]
        matched = [(row, c) for row, c in zip(rows, candidates) if identities_match(identity, c, self.catalog)]
        if not matched:
            return self._no_candidate(identity, candidates)

        for row, candidate in matched:
            if price_for_grade(row.price_by_tier, grade) is not None:
                return self._quote(row.price_by_tier, grade, candidate)
        return NoMatch(ResolutionFailure.NO_PRICE_DATA, f"{len(matched)} matching row(s) without a usable price")


def to_catalog_entry(product: CatalogProduct, catalog: ReferenceCatalog) -> CatalogEntry:
    """Parse a catalog product's own naming into a CatalogEntry."""
    return CatalogEntry(
        console_name=product.console_name,
        product_name=product.product_name,
        parsed_identity=parse_catalog_product(product.console_name, product.product_name, catalog),
        price_by_tier=product.price_by_tier,
        product_url=product.product_url,
    )


class ExternalCatalogSource(PriceSourceBase):
    """SportsCardsPro product search; the first strictly matching candidate wins."""

    source = PriceSource.EXTERNAL_CATALOG_API

    def __init__(
        self,
        client: SportsCardProClient,
        catalog: ReferenceCatalog,
        candidate_limit: int = EXTERNAL_CANDIDATE_LIMIT,
    ):
        self.client = client
        self.catalog = catalog
        self.candidate_limit = candidate_limit

    async def lookup(self, identity: CardIdentity, grade: GradeInfo) -> SourceOutcome:
        if not self.client.is_configured():
            return NoMatch(ResolutionFailure.SOURCE_UNAVAILABLE, "external catalog API not configured")

        products = await self.client.search_products(build_query(identity))
        candidates: List[CardIdentity] = []
        for product in products[: self.candidate_limit]:
            entry = to_catalog_entry(product, self.catalog)
            candidates.append(entry.parsed_identity)
            if identities_match(identity, entry.parsed_identity, self.catalog):
                return self._quote(entry.price_by_tier, grade, entry.parsed_identity, entry.product_url)
        return self._no_candidate(identity, candidates)


def _same_grade(a: GradeInfo, b: GradeInfo) -> bool:
    if not a.is_graded or not b.is_graded:
        return a.is_graded == b.is_graded
    return a.authority == b.authority and a.numeric_grade == b.numeric_grade


class ScrapedSalesSource(PriceSourceBase):
    """
    Recent sold listings. Every sale title is parsed and must pass the same
    strict identity match plus an equal grade; too few matches is no match.
    """

    source = PriceSource.SCRAPED_SALES

    def __init__(self, client: Sales130PointClient, catalog: ReferenceCatalog, min_samples: int = 3):
        self.client = client
        self.catalog = catalog
        self.min_samples = min_samples

    async def lookup(self, identity: CardIdentity, grade: GradeInfo) -> SourceOutcome:
        query = build_query(identity)
        if grade.is_graded:
            query = f"{query} {grade.label}"

        sales = await self.client.search_sales(query)
        candidates = []
        prices = []
        for sale in sales:
            candidate = parse_title(sale.title, self.catalog)
            candidates.append(candidate)
            if identities_match(identity, candidate, self.catalog) and _same_grade(grade, parse_grade(sale.title)):
                prices.append(sale.price)

        if len(prices) < self.min_samples:
            if prices:
                return NoMatch(
                    ResolutionFailure.NO_CANDIDATE_MATCH,
                    f"{len(prices)} matching sale(s), {self.min_samples} required",
                )
            return self._no_candidate(identity, candidates)

        value = trimmed_mean(prices)
        return PriceQuote(
            value=value,
            source=self.source,
            matched_identity_description=identity.describe(),
            confidence=Confidence.HIGH,
            price_tier=select_tier(grade),
            sample_size=len(prices),
        )
