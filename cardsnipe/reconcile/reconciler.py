"""Identity Reconciler.

Merges identity signals per field in a fixed priority order:
certificate lookup > seller aspects > title parse > OCR-derived certificate.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Tuple

from ..core.types import CardIdentity, Confidence, GradeInfo, REQUIRED_IDENTITY_FIELDS

CERTIFICATE = "certificate"
SELLER_ASPECTS = "seller_aspects"
TITLE = "title"
OCR_CERTIFICATE = "ocr_certificate"

SIGNAL_PRIORITY: Tuple[str, ...] = (CERTIFICATE, SELLER_ASPECTS, TITLE, OCR_CERTIFICATE)

_FIELDS = tuple(f.name for f in fields(CardIdentity))


@dataclass(frozen=True)
class IdentitySignals:
    """Partial identities from each signal source; any may be absent."""
    title_parse: CardIdentity = field(default_factory=CardIdentity)
    certificate_lookup: Optional[CardIdentity] = None
    seller_aspects: Optional[CardIdentity] = None
    ocr_certificate_lookup: Optional[CardIdentity] = None

    def ranked(self) -> List[Tuple[str, CardIdentity]]:
        by_name = {
            CERTIFICATE: self.certificate_lookup,
            SELLER_ASPECTS: self.seller_aspects,
            TITLE: self.title_parse,
            OCR_CERTIFICATE: self.ocr_certificate_lookup,
        }
        return [(name, by_name[name]) for name in SIGNAL_PRIORITY if by_name[name] is not None]


@dataclass(frozen=True)
class Reconciliation:
    identity: CardIdentity
    confidence: Confidence
    provenance: Dict[str, str]


def merge_identities(signals: IdentitySignals) -> Tuple[CardIdentity, Dict[str, str]]:
    """Per-field merge: the highest-priority signal with a value wins that field."""
    values = {}
    provenance: Dict[str, str] = {}
    ranked = signals.ranked()
    for name in _FIELDS:
        for source, identity in ranked:
            value = getattr(identity, name)
            if value is not None:
                values[name] = value
                provenance[name] = source
                break
    return CardIdentity(**values), provenance


def confidence_for(identity: CardIdentity, provenance: Dict[str, str]) -> Confidence:
    if all(getattr(identity, name) is None for name in REQUIRED_IDENTITY_FIELDS):
        return Confidence.NONE
    if CERTIFICATE in provenance.values():
        return Confidence.VERY_HIGH
    return Confidence.HIGH


def explain(signals: IdentitySignals) -> Reconciliation:
    """Reconcile and keep the per-field provenance for audit logging."""
    identity, provenance = merge_identities(signals)
    return Reconciliation(identity, confidence_for(identity, provenance), provenance)


def reconcile(signals: IdentitySignals) -> Tuple[CardIdentity, Confidence]:
    result = explain(signals)
    return result.identity, result.confidence


def reconcile_grade(*grades: Optional[GradeInfo]) -> GradeInfo:
    """First graded GradeInfo in priority order, else the first present one, else raw."""
    present = [g for g in grades if g is not None]
    for grade in present:
        if grade.is_graded:
            return grade
    return present[0] if present else GradeInfo.raw()
