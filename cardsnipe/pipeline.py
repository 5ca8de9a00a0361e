"""Listing to scored deal: parse, reconcile, resolve, score."""

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from .core.types import (
    CertificateRecord,
    DealScoreResult,
    IdentityHints,
    Listing,
    NoMatch,
    PriceQuote,
    REQUIRED_IDENTITY_FIELDS,
    ResolutionResult,
)
from .ocr.extract import CertificateOCR
from .parse.grade import parse_grade
from .parse.title import parse_title
from .pricing.deal_score import score_breakdown
from .pricing.sold_sales import Sales130PointClient
from .reconcile.aspects import (
    certificate_number_from_aspects,
    grade_from_aspects,
    grade_from_certificate_record,
    identity_from_aspects,
    identity_from_certificate,
)
from .reconcile.reconciler import IdentitySignals, explain, reconcile_grade
from .reference.catalog import ReferenceCatalog, load_catalog_file
from .resolve.psa import PSAClient
from .resolve.resolver import PriceResolver
from .resolve.sources import ExternalCatalogSource, LocalCatalogSource, ScrapedSalesSource
from .resolve.sportscardpro import SportsCardProClient
from .store.cache import ResolutionCache
from .store.price_catalog import LocalPriceCatalog
from .utils.config import Settings, resolve_tesseract_path
from .utils.log import LoggerMixin, get_logger
from .utils.validation import validate_listing, validate_url

logger = get_logger(__name__)


class DealPipeline(LoggerMixin):
    """
    Scores marketplace listings against independently resolved market values.

    ``psa_client`` and ``ocr`` are optional; without them certificate numbers
    are ignored unless the caller passes pre-fetched lookups in the hints.
    """

    def __init__(
        self,
        catalog: ReferenceCatalog,
        resolver: PriceResolver,
        psa_client: Optional[PSAClient] = None,
        ocr=None,
        min_deal_score: int = 10,
        batch_size: int = 10,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.psa_client = psa_client
        self.ocr = ocr
        self.min_deal_score = min_deal_score
        self.batch_size = max(1, batch_size)
        self._clock = clock

    async def _lookup_certificate(self, cert_number: Optional[str]) -> Optional[CertificateRecord]:
        if not cert_number or self.psa_client is None or not self.psa_client.is_configured():
            return None
        try:
            return await self.psa_client.lookup_certificate(cert_number)
        except Exception as e:
            self.logger.warning(
                "Certificate lookup failed", cert_number=cert_number, error=str(e), error_type=type(e).__name__
            )
            return None

    async def _ocr_certificate(self, image_url: Optional[str]) -> Optional[CertificateRecord]:
        if not image_url or self.ocr is None:
            return None
        try:
            validate_url(image_url)
            cert_number = await self.ocr.certificate_from_url(image_url)
        except Exception as e:
            self.logger.warning("Certificate OCR failed", url=image_url, error=str(e), error_type=type(e).__name__)
            return None
        return await self._lookup_certificate(cert_number)

    async def reconcile_listing(self, listing: Listing, hints: Optional[IdentityHints] = None) -> ResolutionResult:
        """Build the canonical identity and grade for a listing (no price yet)."""
        hints = hints or IdentityHints()
        title_identity = parse_title(listing.title, self.catalog, hints.sport, hints.player)
        aspects_identity = (
            identity_from_aspects(listing.structured_aspects, self.catalog) if listing.structured_aspects else None
        )

        cert_number = listing.certificate_number or certificate_number_from_aspects(listing.structured_aspects)
        certificate = hints.certificate_lookup or await self._lookup_certificate(cert_number)

        ocr_certificate = hints.ocr_certificate_lookup
        parsed = [i for i in (title_identity, aspects_identity) if i is not None]
        needs_ocr = not any(getattr(i, name) is not None for i in parsed for name in REQUIRED_IDENTITY_FIELDS)
        if ocr_certificate is None and certificate is None and not cert_number and needs_ocr:
            ocr_certificate = await self._ocr_certificate(listing.image_url)

        reconciliation = explain(IdentitySignals(
            title_parse=title_identity,
            certificate_lookup=identity_from_certificate(certificate, self.catalog) if certificate else None,
            seller_aspects=aspects_identity,
            ocr_certificate_lookup=(
                identity_from_certificate(ocr_certificate, self.catalog) if ocr_certificate else None
            ),
        ))
        grade = reconcile_grade(
            grade_from_certificate_record(certificate),
            grade_from_aspects(listing.structured_aspects),
            parse_grade(listing.title),
            grade_from_certificate_record(ocr_certificate),
        )
        self.logger.debug(
            "Identity reconciled",
            item_id=listing.item_id,
            identity=reconciliation.identity.describe(),
            confidence=reconciliation.confidence.value,
            provenance=reconciliation.provenance,
        )
        return ResolutionResult(
            identity=reconciliation.identity,
            grade=grade,
            quote=None,
            confidence=reconciliation.confidence,
        )

    async def resolve_and_score(self, listing: Listing, hints: Optional[IdentityHints] = None) -> DealScoreResult:
        """
        Score one listing. The result always carries the resolution that
        produced it; an unresolved listing scores 0 with its failure reason.

        Raises:
            ParseError: If the listing fails validation.
        """
        validate_listing(listing)
        context = self.log_start("resolve_and_score", item_id=listing.item_id)

        reconciled = await self.reconcile_listing(listing, hints)
        outcome = await self.resolver.resolve(reconciled.identity, reconciled.grade)

        if isinstance(outcome, PriceQuote):
            quote = replace(outcome, confidence=reconciled.confidence)
            resolution = replace(reconciled, quote=quote)
        else:
            quote = None
            resolution = replace(reconciled, reason=outcome.reason, detail=outcome.detail)

        now = self._clock() if self._clock else None
        score, adjustments = score_breakdown(
            listing.current_price, quote, listing.auction, listing.seller, listing.shipping_cost, now
        )
        result = DealScoreResult(
            score=score,
            resolution=resolution,
            adjustments=adjustments,
            is_actionable=quote is not None and score >= self.min_deal_score,
            listing_id=listing.item_id,
        )
        self.log_success(
            context,
            score=score,
            source=quote.source.value if quote else None,
            reason=outcome.reason.value if isinstance(outcome, NoMatch) else None,
        )
        return result

    async def score_batch(
        self,
        listings: Sequence[Listing],
        hints: Optional[Sequence[Optional[IdentityHints]]] = None,
    ) -> List[DealScoreResult]:
        """
        Score listings concurrently, ``batch_size`` at a time. A listing that
        raises is logged and left out; the rest of the batch still completes.
        """
        hints = list(hints) if hints is not None else [None] * len(listings)
        if len(hints) != len(listings):
            raise ValueError("hints must align with listings")

        results: List[DealScoreResult] = []
        for start in range(0, len(listings), self.batch_size):
            chunk = list(zip(listings[start:start + self.batch_size], hints[start:start + self.batch_size]))
            outcomes = await asyncio.gather(
                *(self.resolve_and_score(listing, hint) for listing, hint in chunk),
                return_exceptions=True,
            )
            for (listing, _), outcome in zip(chunk, outcomes):
                if isinstance(outcome, BaseException):
                    if isinstance(outcome, asyncio.CancelledError):
                        raise outcome
                    self.logger.error(
                        "Listing skipped",
                        item_id=listing.item_id,
                        error=str(outcome),
                        error_type=type(outcome).__name__,
                    )
                    continue
                results.append(outcome)
        return results

    async def close(self) -> None:
        for source in self.resolver.sources:
            client = getattr(source, "client", None)
            if client is not None:
                await client.close()
        if self.psa_client is not None:
            await self.psa_client.close()


def build_pipeline(
    settings: Settings,
    catalog: Optional[ReferenceCatalog] = None,
    price_store: Optional[LocalPriceCatalog] = None,
    ocr=None,
) -> DealPipeline:
    """
    Wire a pipeline from settings: local catalog, external catalog API and,
    when enabled, scraped sales, behind one resolution cache. Certificate
    OCR is attached when PSA credentials are set and Tesseract is found.

    Raises:
        CatalogLoadError: If the reference catalog cannot be loaded.
    """
    catalog = catalog or load_catalog_file(settings.CATALOG_PATH)

    sources = [
        LocalCatalogSource(price_store or LocalPriceCatalog(settings.LOCAL_PRICE_DB_PATH), catalog),
        ExternalCatalogSource(
            SportsCardProClient(
                settings.SPORTSCARDPRO_TOKEN,
                min_request_interval=settings.MIN_REQUEST_INTERVAL_S,
                timeout_s=settings.REQUEST_TIMEOUT_S,
            ),
            catalog,
            candidate_limit=settings.EXTERNAL_CANDIDATE_LIMIT,
        ),
    ]
    if settings.SCRAPED_SALES_ENABLED:
        sources.append(ScrapedSalesSource(
            Sales130PointClient(
                min_request_interval=settings.MIN_REQUEST_INTERVAL_S,
                timeout_s=settings.REQUEST_TIMEOUT_S,
            ),
            catalog,
            min_samples=settings.SCRAPED_SALES_MIN_SAMPLES,
        ))

    psa_client = None
    if settings.has_psa_credentials:
        psa_client = PSAClient(
            settings.PSA_USERNAME,
            settings.PSA_PASSWORD,
            min_request_interval=settings.MIN_REQUEST_INTERVAL_S,
            timeout_s=settings.REQUEST_TIMEOUT_S,
        )

    if ocr is None and settings.OCR_ENABLED and psa_client is not None:
        try:
            ocr = CertificateOCR(resolve_tesseract_path(settings.TESSERACT_PATH), timeout_s=settings.REQUEST_TIMEOUT_S)
        except FileNotFoundError as e:
            logger.warning("Certificate OCR disabled", error=str(e))

    resolver = PriceResolver(
        sources,
        cache=ResolutionCache(settings.CACHE_TTL_SECONDS, settings.CACHE_MAX_ENTRIES),
    )
    return DealPipeline(
        catalog,
        resolver,
        psa_client=psa_client,
        ocr=ocr,
        min_deal_score=settings.MIN_DEAL_SCORE,
        batch_size=settings.BATCH_SIZE,
    )
