"""Seller-supplied structured aspects (eBay item specifics) to identity fields."""

from typing import Dict, Mapping, Optional

from ..core.types import CardIdentity, CertificateRecord, GradeAuthority, GradeInfo
from ..parse.grade import grade_from_certificate, parse_authority, parse_grade_value
from ..parse.regexes import parse_year
from ..parse.title import (
    detect_autograph,
    detect_insert,
    detect_set,
    normalize_card_number,
    strip_brand,
)
from ..reference.catalog import ReferenceCatalog, normalize_insert, normalize_name

_ABSENT = {"", "n/a", "na", "none", "base", "unknown", "does not apply", "-"}
_NOT_VARIANT = {"rookie", "rc", "base", "regular", "standard"}

ASPECT_FIELDS: Dict[str, str] = {
    "year manufactured": "year",
    "year": "year",
    "season": "year",
    "set": "set_name",
    "card number": "card_number",
    "parallel/variety": "parallel",
    "parallel": "parallel",
    "insert set": "insert_line",
    "autographed": "is_autograph",
    "autograph": "is_autograph",
    "sport": "sport",
    "player/athlete": "player",
    "player": "player",
    "professional grader": "grader",
    "grade": "grade",
    "certification number": "certificate_number",
}


def _value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return None if text.lower() in _ABSENT else text


def normalize_aspects(aspects: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Map raw aspect names to field names, dropping placeholders like "N/A"."""
    out: Dict[str, str] = {}
    for name, raw in (aspects or {}).items():
        field = ASPECT_FIELDS.get(str(name).strip().lower())
        value = _value(raw)
        if field and value is not None:
            out.setdefault(field, value)
    return out


def _yes_no(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.lower()
    if lowered in ("yes", "true", "y"):
        return True
    if lowered in ("no", "false", "n"):
        return False
    return None


def _set_name(text: Optional[str], catalog: ReferenceCatalog) -> Optional[str]:
    if not text:
        return None
    match = detect_set(text, catalog)
    if match:
        return match.value
    return strip_brand(text)


def identity_from_aspects(aspects: Optional[Mapping[str, str]], catalog: ReferenceCatalog) -> CardIdentity:
    """Partial identity from seller aspects. Unknown aspect names are ignored."""
    fields = normalize_aspects(aspects)
    set_name = _set_name(fields.get("set_name"), catalog)
    insert = fields.get("insert_line")
    if insert:
        match = detect_insert(insert, catalog)
        insert = match.value if match else normalize_insert(insert)
    parallel = normalize_name(fields.get("parallel"))
    if parallel in _NOT_VARIANT:
        parallel = None
    definition = catalog.set_definition(set_name)
    return CardIdentity(
        sport=normalize_name(fields.get("sport")) or (definition.sport if definition else None),
        year=parse_year(fields.get("year", "")),
        set_name=set_name,
        card_number=normalize_card_number(fields.get("card_number")),
        insert_line=insert,
        parallel=parallel,
        is_autograph=_yes_no(fields.get("is_autograph")),
        player=fields.get("player"),
    )


def grade_from_aspects(aspects: Optional[Mapping[str, str]]) -> Optional[GradeInfo]:
    """Grade from "Professional Grader" + "Grade" aspects, or None when absent."""
    fields = normalize_aspects(aspects)
    authority = parse_authority(fields.get("grader"))
    value = parse_grade_value(fields.get("grade"))
    if authority is None or value is None:
        return None
    is_gem = value == 10 and "gem" in fields.get("grade", "").lower()
    return GradeInfo(authority=authority, numeric_grade=value, is_gem=is_gem)


def certificate_number_from_aspects(aspects: Optional[Mapping[str, str]]) -> Optional[str]:
    value = normalize_aspects(aspects).get("certificate_number")
    if value is None:
        return None
    digits = "".join(ch for ch in value if ch.isdigit())
    return digits or None


def identity_from_certificate(record: Optional[CertificateRecord], catalog: ReferenceCatalog) -> CardIdentity:
    """
    Partial identity from a grading-authority certificate.

    The certificate states the variety verbatim; it is kept as the parallel
    unless it names a non-variant such as "ROOKIE". Autograph is only ever
    asserted, never denied, from certificate text.
    """
    if record is None:
        return CardIdentity()
    set_name = _set_name(record.set_name, catalog)
    variety_text = record.parallel or record.variety
    parallel = normalize_name(variety_text)
    insert = None
    if parallel:
        insert_match = detect_insert(parallel, catalog)
        if insert_match and insert_match.value == normalize_insert(parallel):
            insert, parallel = insert_match.value, None
    if parallel in _NOT_VARIANT:
        parallel = None
    autograph = detect_autograph(f"{record.set_name or ''} {variety_text or ''}") or None
    definition = catalog.set_definition(set_name)
    return CardIdentity(
        sport=(definition.sport if definition else None) or catalog.player_sport(record.player),
        year=record.year,
        set_name=set_name,
        card_number=normalize_card_number(record.card_number),
        insert_line=insert,
        parallel=parallel,
        is_autograph=autograph,
        player=record.player.title() if record.player and record.player.isupper() else record.player,
    )


def grade_from_certificate_record(record: Optional[CertificateRecord]) -> Optional[GradeInfo]:
    if record is None or record.authority is GradeAuthority.RAW:
        return None
    return grade_from_certificate(record)
