"""Reference catalog of known set, parallel, insert and player names.

The catalog is loaded once at start-up and passed explicitly into the parser
and matcher. It is read-only after construction.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple, Union

from ..core.constants import LABEL_NOISE_PHRASES, SIMPLE_COLOR_SUFFIXES
from ..utils.error_handler import CatalogLoadError
from ..utils.log import get_logger

logger = get_logger(__name__)

_SPACE_RE = re.compile(r"\s+")


def normalize_name(value: Optional[str]) -> Optional[str]:
    """Lowercase, trim and collapse internal whitespace. Empty becomes None."""
    if value is None:
        return None
    text = _SPACE_RE.sub(" ", str(value)).strip().lower()
    return text or None


def normalize_insert(value: Optional[str]) -> Optional[str]:
    text = normalize_name(value)
    if text is None:
        return None
    return normalize_name(text.replace("-", " ").replace(",", ""))


def phrase_pattern(phrase: str) -> Pattern:
    """Word-bounded pattern for a phrase, tolerant of spaces or hyphens between words."""
    words = [re.escape(w) for w in re.split(r"[\s\-]+", phrase.strip()) if w]
    body = r"[\s\-]+".join(words)
    return re.compile(rf"(?<![a-z0-9]){body}(?![a-z0-9])", re.IGNORECASE)


def _is_compound(name: str) -> bool:
    return any(sep in name for sep in (" ", "-", "/"))


@dataclass(frozen=True)
class SetDefinition:
    key: str
    name: str
    sport: Optional[str]
    aliases: Tuple[str, ...]
    parallels: Tuple[str, ...] = ()
    inserts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PhraseRule:
    phrase: str
    canonical: str
    pattern: Pattern


class ReferenceCatalog:
    """Lookup tables for identity parsing, built from set definitions."""

    def __init__(
        self,
        sets: Iterable[SetDefinition],
        parallels: Iterable[str] = (),
        inserts: Iterable[str] = (),
        players: Optional[Mapping[str, Iterable[str]]] = None,
        color_suffixes: Iterable[str] = SIMPLE_COLOR_SUFFIXES,
        noise_phrases: Iterable[str] = (),
    ):
        self.sets: Dict[str, SetDefinition] = {}
        for definition in sets:
            self.sets.setdefault(definition.name, definition)

        self.color_suffixes: Tuple[str, ...] = tuple(
            s for s in (normalize_name(x) for x in color_suffixes) if s
        )

        all_parallels = _ordered_unique(
            normalize_name(p)
            for p in [*parallels, *(p for d in self.sets.values() for p in d.parallels)]
        )
        all_inserts = _ordered_unique(
            normalize_insert(i)
            for i in [*inserts, *(i for d in self.sets.values() for i in d.inserts)]
        )

        # Compound names are tried before simple ones, longest first.
        self.compound_parallels: Tuple[str, ...] = tuple(
            sorted((p for p in all_parallels if _is_compound(p)), key=len, reverse=True)
        )
        simple = [p for p in all_parallels if not _is_compound(p)]
        colors = sorted((p for p in simple if p not in self.color_suffixes), key=len, reverse=True)
        finishes = sorted((p for p in simple if p in self.color_suffixes), key=len, reverse=True)
        self.simple_parallels: Tuple[str, ...] = tuple(colors + finishes)
        self.inserts: Tuple[str, ...] = tuple(
            sorted(all_inserts, key=lambda i: (not _is_compound(i), -len(i)))
        )

        self.players: Dict[str, Optional[str]] = {}
        for sport, names in (players or {}).items():
            for name in names:
                key = normalize_name(name)
                if key:
                    self.players.setdefault(key, sport)

        # Team names and label wording; masked before colours are read.
        self.noise_phrases: Tuple[str, ...] = tuple(sorted(
            _ordered_unique(normalize_name(p) for p in [*LABEL_NOISE_PHRASES, *noise_phrases]),
            key=len, reverse=True,
        ))

        self._set_rules = self._build_set_rules()
        self._parallel_rules = [PhraseRule(p, p, phrase_pattern(p)) for p in self.compound_parallels]
        self._simple_rules = [PhraseRule(p, p, phrase_pattern(p)) for p in self.simple_parallels]
        self._insert_rules = [PhraseRule(i, i, phrase_pattern(i)) for i in self.inserts]
        self._player_rules = [
            PhraseRule(name, name, phrase_pattern(name))
            for name in sorted(self.players, key=len, reverse=True)
        ]
        self._noise_rules = [PhraseRule(p, p, phrase_pattern(p)) for p in self.noise_phrases]

    def _build_set_rules(self) -> List[PhraseRule]:
        entries: List[Tuple[str, str]] = []
        seen = set()
        for definition in self.sets.values():
            for alias in (definition.name, *definition.aliases):
                if alias and alias not in seen:
                    seen.add(alias)
                    entries.append((alias, definition.name))
        # Narrow (more words, longer) phrases precede their prefixes; the sort
        # is stable so equal-ranked phrases keep definition order.
        entries.sort(key=lambda e: (-len(e[0].split()), -len(e[0])))
        return [PhraseRule(alias, canonical, phrase_pattern(alias)) for alias, canonical in entries]

    @property
    def set_rules(self) -> List[PhraseRule]:
        return list(self._set_rules)

    @property
    def compound_parallel_rules(self) -> List[PhraseRule]:
        return list(self._parallel_rules)

    @property
    def simple_parallel_rules(self) -> List[PhraseRule]:
        return list(self._simple_rules)

    @property
    def insert_rules(self) -> List[PhraseRule]:
        return list(self._insert_rules)

    @property
    def player_rules(self) -> List[PhraseRule]:
        return list(self._player_rules)

    @property
    def noise_rules(self) -> List[PhraseRule]:
        return list(self._noise_rules)

    def canonical_set_name(self, name: Optional[str]) -> Optional[str]:
        """Map a set name or any alias to its canonical name."""
        key = normalize_name(name)
        if key is None:
            return None
        for rule in self._set_rules:
            if rule.phrase == key:
                return rule.canonical
        return None

    def set_definition(self, name: Optional[str]) -> Optional[SetDefinition]:
        canonical = self.canonical_set_name(name)
        return self.sets.get(canonical) if canonical else None

    def is_parallel(self, name: Optional[str]) -> bool:
        key = normalize_name(name)
        return key in self.compound_parallels or key in self.simple_parallels

    def is_compound_parallel(self, name: Optional[str]) -> bool:
        return normalize_name(name) in self.compound_parallels

    def is_simple_color(self, name: Optional[str]) -> bool:
        key = normalize_name(name)
        return key in self.simple_parallels and key not in self.color_suffixes

    def is_insert(self, name: Optional[str]) -> bool:
        return normalize_insert(name) in self.inserts

    def player_sport(self, name: Optional[str]) -> Optional[str]:
        return self.players.get(normalize_name(name) or "")

    def stats(self) -> Dict[str, int]:
        return {
            "sets": len(self.sets),
            "set_aliases": len(self._set_rules),
            "compound_parallels": len(self.compound_parallels),
            "simple_parallels": len(self.simple_parallels),
            "inserts": len(self.inserts),
            "players": len(self.players),
            "noise_phrases": len(self.noise_phrases),
        }


def _ordered_unique(values: Iterable[Optional[str]]) -> List[str]:
    seen = set()
    out = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            out.append(value)
    return out


def _string_list(value: Any, field: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise CatalogLoadError(f"'{field}' must be a list of strings", details={"field": field})
    return list(value)


def load_catalog(set_definitions: Mapping[str, Any]) -> ReferenceCatalog:
    """
    Build a ReferenceCatalog from a set-definition document.

    Expected shape::

        {
          "sets": {"prizm": {"name": "Prizm", "sport": "basketball",
                             "alternateNames": ["Panini Prizm"],
                             "parallels": [...], "inserts": [...]}},
          "commonParallels": [...],
          "commonInserts": [...],
          "colorSuffixes": ["refractor", "holo"],
          "players": {"basketball": ["LeBron James"]},
          "noisePhrases": ["Boston Red Sox", "Blue Jays"]
        }

    Raises:
        CatalogLoadError: If the document is malformed. Start-up must abort.
    """
    if not isinstance(set_definitions, Mapping):
        raise CatalogLoadError("Set definitions must be a mapping")

    raw_sets = set_definitions.get("sets")
    if not isinstance(raw_sets, Mapping) or not raw_sets:
        raise CatalogLoadError("Set definitions contain no 'sets' mapping")

    sets = []
    for key, raw in raw_sets.items():
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str):
            raise CatalogLoadError(f"Set '{key}' has no name", details={"set": key})
        name = normalize_name(raw["name"])
        aliases = [normalize_name(a) for a in _string_list(raw.get("alternateNames"), f"{key}.alternateNames")]
        key_alias = normalize_name(str(key).replace("-", " "))
        sets.append(SetDefinition(
            key=str(key),
            name=name,
            sport=normalize_name(raw.get("sport")),
            aliases=tuple(a for a in [key_alias, *aliases] if a and a != name),
            parallels=tuple(_string_list(raw.get("parallels"), f"{key}.parallels")),
            inserts=tuple(_string_list(raw.get("inserts"), f"{key}.inserts")),
        ))

    raw_players = set_definitions.get("players") or {}
    if isinstance(raw_players, list):
        players = {None: _string_list(raw_players, "players")}
    elif isinstance(raw_players, Mapping):
        players = {normalize_name(sport): _string_list(names, f"players.{sport}")
                   for sport, names in raw_players.items()}
    else:
        raise CatalogLoadError("'players' must be a list or a mapping of sport to names")

    suffixes = set_definitions.get("colorSuffixes")
    catalog = ReferenceCatalog(
        sets=sets,
        parallels=_string_list(set_definitions.get("commonParallels"), "commonParallels"),
        inserts=_string_list(set_definitions.get("commonInserts"), "commonInserts"),
        players=players,
        color_suffixes=_string_list(suffixes, "colorSuffixes") if suffixes is not None else SIMPLE_COLOR_SUFFIXES,
        noise_phrases=_string_list(set_definitions.get("noisePhrases"), "noisePhrases"),
    )
    logger.info("Reference catalog loaded", **catalog.stats())
    return catalog


def load_catalog_file(path: Union[str, Path]) -> ReferenceCatalog:
    """Read a JSON set-definition file and build the catalog."""
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogLoadError(
            f"Failed to read reference catalog: {path}",
            details={"path": str(path), "error": str(e)},
        ) from e
    return load_catalog(document)
