"""
Identity reconciliation across certificate, aspect, title and OCR signals.
"""

from .aspects import (
    certificate_number_from_aspects,
    grade_from_aspects,
    grade_from_certificate_record,
    identity_from_aspects,
    identity_from_certificate,
)
from .reconciler import (
    SIGNAL_PRIORITY,
    IdentitySignals,
    Reconciliation,
    explain,
    reconcile,
    reconcile_grade,
)

__all__ = [
    "IdentitySignals",
    "Reconciliation",
    "SIGNAL_PRIORITY",
    "certificate_number_from_aspects",
    "explain",
    "grade_from_aspects",
    "grade_from_certificate_record",
    "identity_from_aspects",
    "identity_from_certificate",
    "reconcile",
    "reconcile_grade",
]
