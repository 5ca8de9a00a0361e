"""Identity parsing for listing titles and catalog product names."""

from .grade import grade_from_certificate, parse_grade
from .title import (
    PhraseMatch,
    detect_autograph,
    detect_insert,
    detect_parallel,
    detect_player,
    detect_set,
    detect_sport,
    extract_card_number,
    extract_year,
    mask_noise,
    normalize_card_number,
    parse_catalog_product,
    parse_title,
    strip_brand,
)

__all__ = [
    "PhraseMatch",
    "detect_autograph",
    "detect_insert",
    "detect_parallel",
    "detect_player",
    "detect_set",
    "detect_sport",
    "extract_card_number",
    "extract_year",
    "grade_from_certificate",
    "mask_noise",
    "normalize_card_number",
    "parse_catalog_product",
    "parse_grade",
    "parse_title",
    "strip_brand",
]
