"""Regex patterns for listing-title and catalog-name extraction."""

import re
from typing import List, Optional, Pattern, Tuple

# First 4-digit token in 1980-2029, not part of a card number or serial.
YEAR_PATTERN = re.compile(r'(?<![\d#/])(19[89]\d|20[0-2]\d)(?!\d)')

# Tried in priority order; the first pattern that matches wins.
CARD_NUMBER_PATTERNS: List[Tuple[str, Pattern]] = [
    ("hash", re.compile(r'#\s*([A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)')),
    ("no", re.compile(r'\bNo\.\s*([A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)', re.IGNORECASE)),
    ("card", re.compile(r'\bCard\s*#\s*([A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)', re.IGNORECASE)),
    ("numbered", re.compile(r'(?<![\d/.])(\d{1,4})\s*/\s*(\d{1,4})(?![\d/])')),
]

AUTOGRAPH_PATTERN = re.compile(
    r'(?<!non-)(?<!non )\b(?:auto|autos|autograph|autographs|autographed|signed)\b',
    re.IGNORECASE,
)

GRADE_PATTERN = re.compile(
    r'\b(PSA|BGS|SGC|CGC|BECKETT)\s*(?:GEM\s*(?:MT|MINT)\s*|MINT\s*|PRISTINE\s*)?(10|[1-9](?:\.5)?)(?![\d.])',
    re.IGNORECASE,
)
GEM_TEN_PATTERN = re.compile(r'\bGEM\s*(?:MT|MINT)?\s*10\b', re.IGNORECASE)
RAW_PATTERN = re.compile(r'\b(?:RAW|UNGRADED|NOT\s+GRADED)\b', re.IGNORECASE)

BRACKET_PATTERN = re.compile(r'\[([^\]]*)\]')
CONSOLE_SPORT_PATTERN = re.compile(r'^\s*(basketball|baseball|football|hockey|soccer)\s+cards\b', re.IGNORECASE)


def parse_year(text: str) -> Optional[int]:
    """
    Return the first plausible card year in text.

    Examples:
        >>> parse_year("2019-20 Panini Hoops")
        2019
        >>> parse_year("LeBron #2019") is None
        True
    """
    match = YEAR_PATTERN.search(text or "")
    return int(match.group(1)) if match else None


def parse_card_number(text: str) -> Optional[str]:
    """Return the raw card-number token from the highest-priority pattern that matches."""
    for _, pattern in CARD_NUMBER_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return match.group(1)
    return None
