"""Grade to price-column selection."""

from typing import Optional, Tuple

from ..core.types import GradeAuthority, GradeInfo, PriceByTier, PriceTier

_TOP_AUTHORITIES = (GradeAuthority.PSA, GradeAuthority.BGS)


def select_tier(grade: Optional[GradeInfo]) -> PriceTier:
    """
    Map a grade to exactly one price column.

    PSA/BGS 10 (or an explicit gem 10) use the top column, PSA/BGS 9 and
    9.5 the mid column, PSA/BGS 8 and 8.5 the entry-graded column.
    Everything else is priced as ungraded.
    """
    if grade is None or grade.numeric_grade is None:
        return PriceTier.LOOSE
    value = grade.numeric_grade
    if grade.authority in _TOP_AUTHORITIES:
        if value == 10:
            return PriceTier.GRADE_10
        if value in (9, 9.5):
            return PriceTier.GRADE_9
        if value in (8, 8.5):
            return PriceTier.GRADE_8
        return PriceTier.LOOSE
    if grade.is_gem and value == 10:
        return PriceTier.GRADE_10
    return PriceTier.LOOSE


def _usable(cents: Optional[int]) -> bool:
    return cents is not None and cents > 0


def price_for_grade(prices: PriceByTier, grade: Optional[GradeInfo]) -> Optional[Tuple[PriceTier, float]]:
    """
    Return (tier, value in currency units) for the grade, or None.

    A missing or non-positive price at the selected column falls back to the
    ungraded column. None means no usable price exists.
    """
    tier = select_tier(grade)
    cents = prices.get(tier)
    if not _usable(cents) and tier is not PriceTier.LOOSE:
        tier = PriceTier.LOOSE
        cents = prices.get(tier)
    if not _usable(cents):
        return None
    return tier, cents / 100.0
