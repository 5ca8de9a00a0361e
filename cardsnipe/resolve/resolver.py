"""Price Resolver: ranked source chain behind the resolution cache."""

import asyncio
from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

from ..core.types import CardIdentity, GradeInfo, NoMatch, PriceQuote, ResolutionFailure
from ..store.cache import ResolutionCache
from ..utils.log import LoggerMixin
from .sources import PriceSourceBase

Resolution = Union[PriceQuote, NoMatch]

# Most informative failure first.
FAILURE_PRIORITY: Tuple[ResolutionFailure, ...] = (
    ResolutionFailure.NO_PRICE_DATA,
    ResolutionFailure.NO_CANDIDATE_MATCH,
    ResolutionFailure.SOURCE_UNAVAILABLE,
)


def summarize_failures(failures: Sequence[NoMatch]) -> NoMatch:
    """Collapse per-source failures into the single most informative reason."""
    for reason in FAILURE_PRIORITY:
        details = [f.detail for f in failures if f.reason is reason and f.detail]
        if any(f.reason is reason for f in failures):
            return NoMatch(reason, "; ".join(details))
    return NoMatch(ResolutionFailure.SOURCE_UNAVAILABLE, "no price sources configured")


def resolution_key(identity: CardIdentity, grade: GradeInfo) -> Hashable:
    return identity.cache_key(), grade.cache_key()


class PriceResolver(LoggerMixin):
    """
    Resolves an identity and grade to a PriceQuote or a typed NoMatch.

    Identities missing year, set or card number are rejected before any
    source is consulted. Outcomes are written through the cache, except a
    failure where any source was unavailable, which is transient. Concurrent calls for the same
    key share one chain run.
    """

    def __init__(self, sources: Sequence[PriceSourceBase], cache: Optional[ResolutionCache] = None):
        self.sources: List[PriceSourceBase] = list(sources)
        self.cache = cache
        self._in_flight: Dict[Hashable, "asyncio.Future[Resolution]"] = {}

    async def resolve(self, identity: CardIdentity, grade: GradeInfo) -> Resolution:
        missing = identity.missing_required()
        if missing:
            self.logger.info("Insufficient identity", missing=missing)
            return NoMatch(ResolutionFailure.INSUFFICIENT_IDENTITY, f"missing {', '.join(missing)}")

        key = resolution_key(identity, grade)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                self._log_outcome(identity, cached, cache_hit=True)
                return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_chain(key, identity, grade))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def _run_chain(self, key: Hashable, identity: CardIdentity, grade: GradeInfo) -> Resolution:
        context = self.log_start("resolve", identity=identity.describe(), grade=grade.label)
        failures: List[NoMatch] = []
        outcome: Optional[Resolution] = None

        for source in self.sources:
            try:
                result = await source.lookup(identity, grade)
            except Exception as e:
                self.logger.warning(
                    "Price source unavailable",
                    source=source.source.value,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result = NoMatch(ResolutionFailure.SOURCE_UNAVAILABLE, f"{source.source.value}: {e}")

            if isinstance(result, PriceQuote):
                outcome = result
                break
            failures.append(result)

        if outcome is None:
            outcome = summarize_failures(failures)

        if self.cache is not None and not self._is_transient(outcome, failures):
            self.cache.set(key, outcome)

        self._log_outcome(identity, outcome, cache_hit=False, context=context)
        return outcome

    @staticmethod
    def _is_transient(outcome: Resolution, failures: Sequence[NoMatch]) -> bool:
        """A failure is only final once every source in the chain actually answered."""
        if isinstance(outcome, PriceQuote):
            return False
        return any(f.reason is ResolutionFailure.SOURCE_UNAVAILABLE for f in failures)

    def _log_outcome(self, identity: CardIdentity, outcome: Resolution, cache_hit: bool, context=None):
        if isinstance(outcome, PriceQuote):
            fields = {"source": outcome.source.value, "value": outcome.value, "tier": outcome.price_tier.value}
        else:
            fields = {"reason": outcome.reason.value, "detail": outcome.detail}
        if context is not None:
            self.log_success(context, cache_hit=cache_hit, **fields)
        else:
            self.logger.info("resolve completed", identity=identity.describe(), cache_hit=cache_hit, **fields)
