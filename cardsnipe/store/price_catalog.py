"""SQLite-backed local price catalog.

Rows are SportsCardsPro exports already parsed into identity fields, prices
in cents. Lookups narrow by year, card number, sport and set name in SQL;
the strict field predicates are applied by the caller.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

from ..core.types import CardIdentity, LocalPriceRow, PriceByTier
from ..parse.title import normalize_card_number, parse_catalog_product
from ..reference.catalog import ReferenceCatalog, normalize_insert, normalize_name
from ..utils.config import ensure_cache_dir
from ..utils.error_handler import CacheError, ParseError
from ..utils.log import get_logger

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS price_data (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        console_name TEXT,
        product_name TEXT,
        sport TEXT,
        year TEXT NOT NULL,
        set_name TEXT NOT NULL,
        card_number TEXT NOT NULL,
        parallel TEXT,
        insert_line TEXT,
        is_autograph INTEGER NOT NULL DEFAULT 0,
        player_name TEXT,
        raw_price INTEGER,
        psa8_price INTEGER,
        psa9_price INTEGER,
        psa10_price INTEGER
    )
"""
_INDEX = "CREATE INDEX IF NOT EXISTS idx_price_lookup ON price_data (year, card_number, set_name)"


def _cents(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def row_from_mapping(data: Mapping[str, Any], catalog: Optional[ReferenceCatalog] = None) -> LocalPriceRow:
    """
    Build a LocalPriceRow from either parsed fields (``year``, ``set_name``,
    ``card_number``...) or raw ``console_name``/``product_name`` naming,
    which is run through the catalog-side parser.

    Raises:
        ParseError: If year, set name or card number cannot be determined.
    """
    prices = data.get("price_by_tier") or data
    price_by_tier = PriceByTier(
        loose=_cents(prices.get("loose")),
        grade8=_cents(prices.get("grade8")),
        grade9=_cents(prices.get("grade9")),
        grade10=_cents(prices.get("grade10")),
    )

    identity = CardIdentity()
    if data.get("product_name") and catalog is not None and not data.get("set_name"):
        identity = parse_catalog_product(data.get("console_name"), data.get("product_name"), catalog, data.get("sport"))

    year = data.get("year", identity.year)
    set_name = data.get("set_name") or identity.set_name
    card_number = data.get("card_number") or identity.card_number
    if year in (None, "") or not set_name or not card_number:
        raise ParseError("Price row lacks year, set name or card number", details={"row": dict(data)})

    if catalog is not None:
        set_name = catalog.canonical_set_name(set_name) or set_name

    try:
        year_value = int(str(year)[:4])
    except ValueError as e:
        raise ParseError("Price row has an invalid year", details={"year": year}) from e

    return LocalPriceRow(
        year=year_value,
        set_name=normalize_name(set_name),
        card_number=normalize_card_number(card_number),
        sport=normalize_name(data.get("sport")) or identity.sport,
        price_by_tier=price_by_tier,
        parallel=normalize_name(data.get("parallel")) if "parallel" in data else identity.parallel,
        insert_line=normalize_insert(data.get("insert_line")) if "insert_line" in data else identity.insert_line,
        is_autograph=bool(data.get("is_autograph", identity.is_autograph)),
        console_name=data.get("console_name"),
        product_name=data.get("product_name"),
        player=data.get("player") or identity.player,
    )


def load_rows_file(path: Union[str, Path], catalog: Optional[ReferenceCatalog] = None) -> List[LocalPriceRow]:
    """Read a JSON array of price rows."""
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ParseError(f"Failed to read price rows: {path}", details={"error": str(e)}) from e
    if not isinstance(document, list):
        raise ParseError("Price rows file must contain a JSON array", details={"path": str(path)})
    return [row_from_mapping(item, catalog) for item in document]


class LocalPriceCatalog:
    """Local SportsCardsPro price table."""

    def __init__(self, db_path: Union[str, Path] = "cache/prices.db"):
        self.logger = get_logger(__name__)
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            ensure_cache_dir(self.db_path)
            self._memory_conn = None
        else:
            self._memory_conn = sqlite3.connect(":memory:", check_same_thread=False)
        self._init_database()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, committing on success. File connections are closed after use."""
        conn = self._memory_conn or sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            if conn is not self._memory_conn:
                conn.close()

    def _init_database(self):
        try:
            with self._connection() as conn:
                conn.execute(_SCHEMA)
                conn.execute(_INDEX)
            self.logger.debug("Price catalog initialized", db_path=self.db_path)
        except sqlite3.Error as e:
            raise CacheError("Error initializing price catalog", details={"db_path": self.db_path, "error": str(e)}) from e

    def insert_rows(self, rows: Iterable[LocalPriceRow]) -> int:
        """Insert rows and return how many were written."""
        values = [
            (
                r.console_name,
                r.product_name,
                normalize_name(r.sport),
                str(r.year),
                normalize_name(r.set_name),
                normalize_card_number(r.card_number),
                normalize_name(r.parallel),
                normalize_insert(r.insert_line),
                1 if r.is_autograph else 0,
                r.player,
                r.price_by_tier.loose,
                r.price_by_tier.grade8,
                r.price_by_tier.grade9,
                r.price_by_tier.grade10,
            )
            for r in rows
        ]
        try:
            with self._connection() as conn:
                conn.executemany(
                    """
                    INSERT INTO price_data
                    (console_name, product_name, sport, year, set_name, card_number, parallel,
                     insert_line, is_autograph, player_name, raw_price, psa8_price, psa9_price, psa10_price)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                    values,
                )
        except sqlite3.Error as e:
            raise CacheError("Error inserting price rows", details={"error": str(e)}) from e
        self.logger.info("Price rows inserted", count=len(values))
        return len(values)

    def count(self, sport: Optional[str] = None) -> int:
        with self._connection() as conn:
            if sport:
                cursor = conn.execute("SELECT COUNT(*) FROM price_data WHERE sport = ?", (normalize_name(sport),))
            else:
                cursor = conn.execute("SELECT COUNT(*) FROM price_data")
            return int(cursor.fetchone()[0])

    def has_data(self, sport: Optional[str] = None) -> bool:
        return self.count(sport) > 0

    def find_candidates(self, identity: CardIdentity, limit: int = 50) -> List[LocalPriceRow]:
        """Rows sharing year, card number and set name (and sport, when known)."""
        sql = """
            SELECT * FROM price_data
            WHERE year = ? AND card_number = ? AND LOWER(set_name) = ?
        """
        params: List[Any] = [
            str(identity.year),
            normalize_card_number(identity.card_number),
            normalize_name(identity.set_name),
        ]
        if identity.sport:
            sql += " AND (sport = ? OR sport IS NULL)"
            params.append(normalize_name(identity.sport))
        sql += " ORDER BY id LIMIT ?"
        params.append(limit)

        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._to_row(r) for r in rows]

    @staticmethod
    def _to_row(row: sqlite3.Row) -> LocalPriceRow:
        return LocalPriceRow(
            year=int(row["year"]),
            set_name=row["set_name"],
            card_number=row["card_number"],
            sport=row["sport"],
            price_by_tier=PriceByTier(
                loose=row["raw_price"],
                grade8=row["psa8_price"],
                grade9=row["psa9_price"],
                grade10=row["psa10_price"],
            ),
            parallel=row["parallel"] or None,
            insert_line=row["insert_line"] or None,
            is_autograph=bool(row["is_autograph"]),
            console_name=row["console_name"],
            product_name=row["product_name"],
            player=row["player_name"],
        )

    def close(self) -> None:
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None
