"""Tests for the SQLite local price catalog."""

import json
from dataclasses import replace

import pytest

from cardsnipe.core.types import CardIdentity, PriceByTier
from cardsnipe.store.price_catalog import LocalPriceCatalog, load_rows_file, row_from_mapping
from cardsnipe.utils.error_handler import ParseError

from conftest import make_row


class TestLocalPriceCatalog:
    """Test LocalPriceCatalog class."""

    def test_empty_store(self, price_store):
        assert price_store.count() == 0
        assert not price_store.has_data()

    def test_insert_and_count_by_sport(self, price_store):
        assert price_store.insert_rows([make_row(), make_row(parallel=None)]) == 2

        assert price_store.count() == 2
        assert price_store.count("Basketball") == 2
        assert not price_store.has_data("baseball")

    def test_find_candidates_narrows_by_year_number_set(self, price_store, purple_pulsar_identity):
        price_store.insert_rows([
            make_row(),
            make_row(parallel=None, loose=500),
        ])
        other = make_row()
        price_store.insert_rows([
            replace(other, card_number="88"),
            replace(other, year=2020),
        ])

        rows = price_store.find_candidates(purple_pulsar_identity)

        assert [r.parallel for r in rows] == ["purple pulsar", None]
        assert rows[0].price_by_tier == PriceByTier(grade10=12000)
        assert rows[0].to_identity().player == "LeBron James"

    def test_find_candidates_normalizes_query(self, price_store):
        price_store.insert_rows([make_row()])
        identity = CardIdentity(year=2019, set_name="Hoops Premium Stock ", card_number="#087")

        assert len(price_store.find_candidates(identity)) == 1

    def test_rows_without_sport_match_any_sport(self, price_store, purple_pulsar_identity):
        row = make_row()
        price_store.insert_rows([replace(row, sport=None)])

        assert len(price_store.find_candidates(purple_pulsar_identity)) == 1

    def test_conflicting_sport_filtered(self, price_store, purple_pulsar_identity):
        row = make_row()
        price_store.insert_rows([replace(row, sport="football")])

        assert price_store.find_candidates(purple_pulsar_identity) == []

    def test_in_memory_store_persists_between_calls(self):
        store = LocalPriceCatalog(":memory:")
        store.insert_rows([make_row()])

        assert store.count() == 1
        store.close()

    def test_file_store_reopens(self, tmp_path):
        path = tmp_path / "nested" / "prices.db"
        LocalPriceCatalog(path).insert_rows([make_row()])

        assert LocalPriceCatalog(path).count() == 1


class TestRowFromMapping:
    """Test price-row construction from exported data."""

    def test_parsed_fields(self, catalog):
        row = row_from_mapping({
            "year": "2019",
            "set_name": "Panini Hoops Premium Stock",
            "card_number": "#087",
            "sport": "Basketball",
            "parallel": "Purple Pulsar",
            "price_by_tier": {"loose": 2500, "grade10": "12000"},
        }, catalog)

        assert row.year == 2019
        assert row.set_name == "hoops premium stock"
        assert row.card_number == "87"
        assert row.parallel == "purple pulsar"
        assert row.price_by_tier == PriceByTier(loose=2500, grade10=12000)

    def test_catalog_naming_is_parsed(self, catalog):
        row = row_from_mapping({
            "console_name": "Basketball Cards 2019 Panini Hoops Premium Stock",
            "product_name": "LeBron James [Purple Pulsar] #87",
            "grade10": 12000,
        }, catalog)

        assert row.to_identity().set_name == "hoops premium stock"
        assert row.parallel == "purple pulsar"
        assert row.sport == "basketball"
        assert row.player == "LeBron James"

    def test_missing_identity_raises(self, catalog):
        with pytest.raises(ParseError):
            row_from_mapping({"set_name": "Prizm", "card_number": "1"}, catalog)

    def test_invalid_year_raises(self):
        with pytest.raises(ParseError):
            row_from_mapping({"year": "abcd", "set_name": "Prizm", "card_number": "1"})

    def test_load_rows_file(self, tmp_path, catalog):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps([
            {"year": 2019, "set_name": "hoops premium stock", "card_number": "87", "grade10": 12000},
        ]), encoding="utf-8")

        rows = load_rows_file(path, catalog)

        assert len(rows) == 1
        assert rows[0].parallel is None

    def test_load_rows_file_requires_array(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text(json.dumps({"rows": []}), encoding="utf-8")

        with pytest.raises(ParseError):
            load_rows_file(path)
