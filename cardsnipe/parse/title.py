"""Identity parser: free-text titles and catalog product names to CardIdentity.

Every stage is an independent function over plain text. ``parse_title`` and
``parse_catalog_product`` compose them, masking each recognised phrase so a
later stage cannot re-read it (a player called "Green" is not a parallel).
None of these functions raise on malformed input; absent fields are None.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..core.constants import BRAND_PREFIXES, SPORT_KEYWORDS
from ..core.types import CardIdentity
from ..reference.catalog import PhraseRule, ReferenceCatalog, normalize_name, phrase_pattern
from .regexes import (
    AUTOGRAPH_PATTERN,
    BRACKET_PATTERN,
    CONSOLE_SPORT_PATTERN,
    GRADE_PATTERN,
    parse_card_number,
    parse_year,
)

# Bracketed tokens that describe the card but are not a variant name.
_BRACKET_NOISE = {"rc", "rookie", "rookie card", "base", "sp", "ssp", "variation", "short print", "1st", "first"}
_NEXT_WORD = re.compile(r'[\s\-]+([a-z]+)', re.IGNORECASE)


@dataclass(frozen=True)
class PhraseMatch:
    value: str
    start: int
    end: int


def extract_year(text: Optional[str]) -> Optional[int]:
    return parse_year(text or "")


def normalize_card_number(value: Optional[str]) -> Optional[str]:
    """Uppercase, drop '#' and whitespace, strip leading zeros from a numeric number."""
    if value is None:
        return None
    text = re.sub(r'[\s#]', '', str(value)).upper()
    if not text:
        return None
    if text.isdigit():
        return text.lstrip('0') or '0'
    return text


def extract_card_number(text: Optional[str]) -> Optional[str]:
    return normalize_card_number(parse_card_number(text or ""))


def detect_autograph(text: Optional[str]) -> bool:
    return bool(AUTOGRAPH_PATTERN.search(text or ""))


def _first_rule_match(text: str, rules: Iterable[PhraseRule]) -> Optional[PhraseMatch]:
    for rule in rules:
        match = rule.pattern.search(text)
        if match:
            return PhraseMatch(rule.canonical, match.start(), match.end())
    return None


def _mask(text: str, match: Optional[PhraseMatch]) -> str:
    if match is None:
        return text
    return text[:match.start] + " " * (match.end - match.start) + text[match.end:]


def mask_noise(text: Optional[str], catalog: ReferenceCatalog) -> str:
    """Blank out team names, slab-label wording and grade text so their colours are not read as parallels."""
    text = text or ""
    spans = [m.span() for rule in catalog.noise_rules for m in rule.pattern.finditer(text)]
    spans.extend(m.span() for m in GRADE_PATTERN.finditer(text))
    for start, end in spans:
        text = _mask(text, PhraseMatch("", start, end))
    return text


def detect_set(text: Optional[str], catalog: ReferenceCatalog) -> Optional[PhraseMatch]:
    """First set phrase in priority order (narrow names before their prefixes)."""
    return _first_rule_match(text or "", catalog.set_rules)


def detect_player(text: Optional[str], catalog: ReferenceCatalog) -> Optional[PhraseMatch]:
    return _first_rule_match(text or "", catalog.player_rules)


def detect_insert(text: Optional[str], catalog: ReferenceCatalog) -> Optional[PhraseMatch]:
    return _first_rule_match(text or "", catalog.insert_rules)


def detect_parallel(
    text: Optional[str],
    catalog: ReferenceCatalog,
    use_brackets: bool = True,
) -> Optional[PhraseMatch]:
    """
    Detect the parallel named in text.

    Compound names are checked before simple colours, longest first, so
    "blue velocity" is never shadowed by "blue". A simple colour directly
    followed by a finish word ("gold refractor") keeps the finish word.
    With ``use_brackets`` an unknown bracketed variant is taken verbatim.
    """
    text = text or ""
    match = _first_rule_match(text, catalog.compound_parallel_rules)
    if match:
        return match

    match = _first_rule_match(text, catalog.simple_parallel_rules)
    if match:
        if match.value not in catalog.color_suffixes:
            follow = _NEXT_WORD.match(text, match.end)
            if follow and follow.group(1).lower() in catalog.color_suffixes:
                return PhraseMatch(f"{match.value} {follow.group(1).lower()}", match.start, follow.end())
        return match

    if use_brackets:
        return bracket_variant(text, catalog)
    return None


def bracket_variant(text: Optional[str], catalog: ReferenceCatalog) -> Optional[PhraseMatch]:
    """Verbatim content of the first bracket that names a variant."""
    for found in BRACKET_PATTERN.finditer(text or ""):
        content = normalize_name(re.sub(r'#\s*\S+', ' ', found.group(1)))
        if not content or content in _BRACKET_NOISE:
            continue
        if GRADE_PATTERN.search(content) or catalog.is_insert(content):
            continue
        if AUTOGRAPH_PATTERN.fullmatch(content):
            continue
        return PhraseMatch(content, found.start(1), found.end(1))
    return None


def detect_sport(
    text: Optional[str],
    catalog: ReferenceCatalog,
    set_name: Optional[str] = None,
    player: Optional[str] = None,
    sport_hint: Optional[str] = None,
) -> Optional[str]:
    definition = catalog.set_definition(set_name)
    if definition and definition.sport:
        return definition.sport
    if sport_hint:
        return normalize_name(sport_hint)
    player_sport = catalog.player_sport(player)
    if player_sport:
        return player_sport
    lowered = (text or "").lower()
    for sport, keywords in SPORT_KEYWORDS.items():
        if any(re.search(rf'\b{re.escape(k)}\b', lowered) for k in keywords):
            return sport
    return None


def _display_player(match: Optional[PhraseMatch], text: str) -> Optional[str]:
    if match is None:
        return None
    return re.sub(r'\s+', ' ', text[match.start:match.end]).strip()


def parse_title(
    text: Optional[str],
    catalog: ReferenceCatalog,
    sport_hint: Optional[str] = None,
    player_hint: Optional[str] = None,
) -> CardIdentity:
    """Parse a marketplace listing title into a partial CardIdentity."""
    text = str(text) if text is not None else ""
    working = text

    set_match = detect_set(working, catalog)
    working = _mask(working, set_match)

    player_match = detect_player(working, catalog)
    player = _display_player(player_match, text)
    working = _mask(working, player_match)
    if player_hint:
        hint_match = phrase_pattern(player_hint).search(working)
        if hint_match:
            working = _mask(working, PhraseMatch(player_hint, hint_match.start(), hint_match.end()))
        player = player or player_hint

    insert_match = detect_insert(working, catalog)
    working = _mask(working, insert_match)

    parallel_match = detect_parallel(mask_noise(working, catalog), catalog)
    set_name = set_match.value if set_match else None

    return CardIdentity(
        sport=detect_sport(text, catalog, set_name, player, sport_hint),
        year=extract_year(text),
        set_name=set_name,
        card_number=extract_card_number(text),
        insert_line=insert_match.value if insert_match else None,
        parallel=parallel_match.value if parallel_match else None,
        is_autograph=detect_autograph(text),
        player=player,
    )


def parse_catalog_product(
    console_name: Optional[str],
    product_name: Optional[str],
    catalog: ReferenceCatalog,
    sport: Optional[str] = None,
) -> CardIdentity:
    """
    Parse catalog-side naming, e.g. console "Basketball Cards 2019 Panini Hoops
    Premium Stock" with product "LeBron James [Purple Pulsar] #87".

    The variant is read only from bracketed text in the product name.
    """
    console = console_name or ""
    product = product_name or ""

    console_sport = CONSOLE_SPORT_PATTERN.match(console)
    set_match = detect_set(console, catalog)
    if set_match is None:
        set_match = detect_set(product, catalog)
        product_rest = _mask(product, set_match)
        console_rest = console
    else:
        product_rest = product
        console_rest = _mask(console, set_match)

    brackets = " ".join(f"[{b}]" for b in BRACKET_PATTERN.findall(product_rest))
    bracket_inserts = detect_insert(brackets, catalog)
    insert_match = bracket_inserts or detect_insert(console_rest, catalog)
    parallel_match = detect_parallel(_mask(brackets, bracket_inserts), catalog)

    player_match = detect_player(product_rest, catalog)
    player = _display_player(player_match, product_rest)
    if player is None:
        head = re.split(r'[\[#]', product_rest, maxsplit=1)[0].strip()
        player = head or None

    set_name = set_match.value if set_match else None
    return CardIdentity(
        sport=normalize_name(sport) or (console_sport.group(1).lower() if console_sport else None)
        or detect_sport(f"{console} {product}", catalog, set_name, player),
        year=extract_year(console) or extract_year(product),
        set_name=set_name,
        card_number=extract_card_number(product),
        insert_line=insert_match.value if insert_match else None,
        parallel=parallel_match.value if parallel_match else None,
        is_autograph=detect_autograph(product) or detect_autograph(console_rest),
        player=player,
    )


def strip_brand(name: Optional[str]) -> Optional[str]:
    """Drop a leading year and manufacturer from a free-form set name."""
    text = normalize_name(name)
    if text is None:
        return None
    text = re.sub(r'^(?:19|20)\d{2}(?:-\d{2,4})?\s+', '', text)
    for brand in BRAND_PREFIXES:
        if text.startswith(brand + " ") and len(text) > len(brand) + 1:
            text = text[len(brand) + 1:]
            break
    return normalize_name(text)

