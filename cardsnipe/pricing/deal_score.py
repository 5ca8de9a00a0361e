"""Deal score calculation.

score = round((value - price) / value * 100), plus additive auction-timing
and seller-trust adjustments, clamped to [0, 100].
"""

import math
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.constants import (
    AUCTION_ENDING_BONUS,
    AUCTION_ENDING_HOURS,
    AUCTION_ENDING_MAX_BIDS,
    AUCTION_FINAL_BONUS,
    AUCTION_FINAL_HOURS,
    AUCTION_FINAL_MAX_BIDS,
    SELLER_FEEDBACK_COUNT_BONUS,
    SELLER_FEEDBACK_COUNT_MIN,
    SELLER_FEEDBACK_PCT_BONUS,
    SELLER_FEEDBACK_PCT_MIN,
    SHIPPING_PENALTY,
    SHIPPING_PENALTY_THRESHOLD,
)
from ..core.types import AuctionInfo, PriceQuote, SellerInfo

MIN_SCORE = 0
MAX_SCORE = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _hours_left(ends_at: datetime, now: datetime) -> float:
    if ends_at.tzinfo is None:
        ends_at = ends_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (ends_at - now).total_seconds() / 3600.0


def base_score(listing_price: float, value: Optional[float]) -> Optional[int]:
    """Rounded discount percentage, or None when there is no verified value."""
    if value is None or value <= 0:
        return None
    return _round_half_up((value - listing_price) / value * 100)


def score_adjustments(
    auction: Optional[AuctionInfo] = None,
    seller: Optional[SellerInfo] = None,
    shipping_cost: Optional[float] = None,
    now: Optional[datetime] = None,
) -> List[Tuple[str, int]]:
    """Named additive adjustments for the inputs that are present."""
    adjustments: List[Tuple[str, int]] = []

    if auction is not None and auction.ends_at is not None:
        hours = _hours_left(auction.ends_at, now or datetime.now(timezone.utc))
        bids = auction.bid_count or 0
        if 0 < hours < AUCTION_ENDING_HOURS and bids < AUCTION_ENDING_MAX_BIDS:
            adjustments.append(("auction_ending", AUCTION_ENDING_BONUS))
            if hours < AUCTION_FINAL_HOURS and bids < AUCTION_FINAL_MAX_BIDS:
                adjustments.append(("auction_final_minutes", AUCTION_FINAL_BONUS))

    if seller is not None:
        if seller.feedback_pct is not None and seller.feedback_pct >= SELLER_FEEDBACK_PCT_MIN:
            adjustments.append(("seller_feedback_pct", SELLER_FEEDBACK_PCT_BONUS))
        if seller.feedback_count is not None and seller.feedback_count >= SELLER_FEEDBACK_COUNT_MIN:
            adjustments.append(("seller_feedback_count", SELLER_FEEDBACK_COUNT_BONUS))

    if shipping_cost is not None and shipping_cost > SHIPPING_PENALTY_THRESHOLD:
        adjustments.append(("shipping_cost", -SHIPPING_PENALTY))

    return adjustments


def score_breakdown(
    listing_price: float,
    quote: Optional[PriceQuote],
    auction: Optional[AuctionInfo] = None,
    seller: Optional[SellerInfo] = None,
    shipping_cost: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Tuple[int, Tuple[Tuple[str, int], ...]]:
    """Return the clamped score together with the adjustments that produced it."""
    base = base_score(listing_price, quote.value if quote is not None else None)
    if base is None:
        return MIN_SCORE, ()
    adjustments = score_adjustments(auction, seller, shipping_cost, now)
    total = base + sum(delta for _, delta in adjustments)
    return max(MIN_SCORE, min(MAX_SCORE, total)), tuple(adjustments)


def calculate_deal_score(
    listing_price: float,
    quote: Optional[PriceQuote],
    auction: Optional[AuctionInfo] = None,
    seller: Optional[SellerInfo] = None,
    shipping_cost: Optional[float] = None,
    now: Optional[datetime] = None,
) -> int:
    score, _ = score_breakdown(listing_price, quote, auction, seller, shipping_cost, now)
    return score
