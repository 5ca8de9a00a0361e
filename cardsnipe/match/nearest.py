"""Closest rejected candidate, for diagnostics only.

Similarity never decides a match. It only tells the operator which
candidate came nearest when every candidate was rejected.
"""

from typing import Optional, Sequence, Tuple

from rapidfuzz import fuzz

from ..core.types import CardIdentity


def nearest_candidate(
    identity: CardIdentity,
    candidates: Sequence[CardIdentity],
) -> Optional[Tuple[CardIdentity, float]]:
    """Return the candidate whose description is most similar, with its score."""
    if not candidates:
        return None
    wanted = identity.describe().lower()
    scored = [(c, fuzz.token_sort_ratio(wanted, c.describe().lower())) for c in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[0]
