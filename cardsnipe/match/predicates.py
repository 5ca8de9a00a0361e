"""Field-by-field identity equivalence between a listing and a candidate.

A candidate matches only if every rule passes. There is no similarity
threshold: a near-miss on any field is a rejection.
"""

import re
from typing import Callable, List, Optional, Tuple

from ..core.types import CardIdentity
from ..parse.title import normalize_card_number
from ..reference.catalog import ReferenceCatalog, normalize_insert, normalize_name

_SUFFIXES = ("refractor", "holo")


def _single_word(name: str) -> bool:
    return not re.search(r'[\s\-/]', name)


def parallels_match(
    a: Optional[str],
    b: Optional[str],
    catalog: Optional[ReferenceCatalog] = None,
) -> bool:
    """
    Decide whether two parallel names denote the same printed variant.

    Base (None) matches only base. A named compound parallel matches only
    itself. A simple colour also matches that colour with a finish suffix
    ("gold" / "gold refractor"). The relation is symmetric.
    """
    left, right = normalize_name(a), normalize_name(b)
    if left is None and right is None:
        return True
    if left is None or right is None:
        return False
    if left == right:
        return True
    if catalog is not None:
        if catalog.is_compound_parallel(left) or catalog.is_compound_parallel(right):
            return False
        suffixes = catalog.color_suffixes
    else:
        suffixes = _SUFFIXES
    return _suffix_variant(left, right, suffixes, catalog) or _suffix_variant(right, left, suffixes, catalog)


def _suffix_variant(color: str, other: str, suffixes, catalog: Optional[ReferenceCatalog]) -> bool:
    if catalog is not None:
        if not catalog.is_simple_color(color):
            return False
    elif not _single_word(color) or color in suffixes:
        return False
    return any(other == f"{color} {suffix}" for suffix in suffixes)


def year_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    return a.year is not None and a.year == b.year


def set_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    left, right = normalize_name(a.set_name), normalize_name(b.set_name)
    if catalog is not None:
        left = normalize_name(catalog.canonical_set_name(left)) or left
        right = normalize_name(catalog.canonical_set_name(right)) or right
    return left is not None and left == right


def card_number_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    left, right = normalize_card_number(a.card_number), normalize_card_number(b.card_number)
    return left is not None and left == right


def sport_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    left, right = normalize_name(a.sport), normalize_name(b.sport)
    if left is None or right is None:
        return True
    return left == right


def parallel_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    return parallels_match(a.parallel, b.parallel, catalog)


def autograph_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    if a.is_autograph or b.is_autograph:
        return bool(a.is_autograph) and bool(b.is_autograph)
    return True


def insert_matches(a: CardIdentity, b: CardIdentity, catalog=None) -> bool:
    left, right = normalize_insert(a.insert_line), normalize_insert(b.insert_line)
    if left is None and right is None:
        return True
    return left == right


Rule = Callable[[CardIdentity, CardIdentity, Optional[ReferenceCatalog]], bool]

MATCH_RULES: Tuple[Tuple[str, Rule], ...] = (
    ("year", year_matches),
    ("set", set_matches),
    ("card_number", card_number_matches),
    ("sport", sport_matches),
    ("parallel", parallel_matches),
    ("autograph", autograph_matches),
    ("insert", insert_matches),
)


def failed_rules(
    listing: CardIdentity,
    candidate: CardIdentity,
    catalog: Optional[ReferenceCatalog] = None,
) -> List[str]:
    """Names of the rules the pair fails, in rule order."""
    return [name for name, rule in MATCH_RULES if not rule(listing, candidate, catalog)]


def identities_match(
    listing: CardIdentity,
    candidate: CardIdentity,
    catalog: Optional[ReferenceCatalog] = None,
) -> bool:
    return all(rule(listing, candidate, catalog) for _, rule in MATCH_RULES)
