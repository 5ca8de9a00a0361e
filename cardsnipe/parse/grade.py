"""Grade extraction from titles, seller aspects and certificate records."""

import re
from typing import Optional

from ..core.types import CertificateRecord, GradeAuthority, GradeInfo
from .regexes import GEM_TEN_PATTERN, GRADE_PATTERN

_AUTHORITY_ALIASES = {
    "PSA": GradeAuthority.PSA,
    "BGS": GradeAuthority.BGS,
    "BECKETT": GradeAuthority.BGS,
    "SGC": GradeAuthority.SGC,
    "CGC": GradeAuthority.CGC,
}

_NUMBER_PATTERN = re.compile(r'(10|[1-9](?:\.5)?)(?![\d.])')
_AUTHORITY_PATTERN = re.compile(r'\b(PSA|BGS|BECKETT|SGC|CGC)\b', re.IGNORECASE)


def parse_authority(text: Optional[str]) -> Optional[GradeAuthority]:
    """Authority named anywhere in text, e.g. "Professional Sports Authenticator (PSA)"."""
    match = _AUTHORITY_PATTERN.search(text or "")
    return _AUTHORITY_ALIASES[match.group(1).upper()] if match else None


def parse_grade_value(text: Optional[str]) -> Optional[float]:
    """Extract the numeric grade from strings like "GEM MT 10" or "9.5"."""
    if not text:
        return None
    match = _NUMBER_PATTERN.search(str(text))
    return float(match.group(1)) if match else None


def parse_grade(text: Optional[str]) -> GradeInfo:
    """
    Extract grading authority and numeric grade from a listing title.

    Titles without a recognised authority/grade pair are raw.
    """
    text = text or ""
    is_gem = bool(GEM_TEN_PATTERN.search(text))
    match = GRADE_PATTERN.search(text)
    if match:
        authority = _AUTHORITY_ALIASES[match.group(1).upper()]
        grade = float(match.group(2))
        return GradeInfo(authority=authority, numeric_grade=grade, is_gem=is_gem and grade == 10)
    if is_gem:
        return GradeInfo(authority=GradeAuthority.RAW, numeric_grade=10.0, is_gem=True)
    return GradeInfo.raw()


def grade_from_certificate(record: CertificateRecord) -> Optional[GradeInfo]:
    if record.numeric_grade is None:
        return None
    description = record.grade_description or ""
    is_gem = record.numeric_grade == 10 and bool(re.search(r'\bGEM\b', description, re.IGNORECASE))
    return GradeInfo(authority=record.authority, numeric_grade=record.numeric_grade, is_gem=is_gem)
