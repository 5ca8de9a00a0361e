"""
Pricing module: price-column selection, deal scoring and sold-sales data.
"""

from .deal_score import base_score, calculate_deal_score, score_adjustments, score_breakdown
from .sold_sales import Sales130PointClient, SoldSale, parse_sales_table, trimmed_mean
from .tiers import price_for_grade, select_tier

__all__ = [
    "Sales130PointClient",
    "SoldSale",
    "base_score",
    "calculate_deal_score",
    "parse_sales_table",
    "price_for_grade",
    "score_adjustments",
    "score_breakdown",
    "select_tier",
    "trimmed_mean",
]
