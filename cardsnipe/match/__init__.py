"""
Match module for identity equivalence and near-miss diagnostics.
"""

from .nearest import nearest_candidate
from .predicates import MATCH_RULES, failed_rules, identities_match, parallels_match

__all__ = [
    "MATCH_RULES",
    "failed_rules",
    "identities_match",
    "nearest_candidate",
    "parallels_match",
]
