"""Pytest configuration and shared fixtures for cardsnipe tests."""

from typing import List, Optional

import pytest

from cardsnipe.core.types import (
    CardIdentity,
    Confidence,
    GradeAuthority,
    GradeInfo,
    Listing,
    LocalPriceRow,
    NoMatch,
    PriceByTier,
    PriceQuote,
    PriceSource,
    ResolutionFailure,
)
from cardsnipe.reference.catalog import load_catalog
from cardsnipe.resolve.sources import PriceSourceBase
from cardsnipe.store.price_catalog import LocalPriceCatalog

SET_DEFINITIONS = {
    "sets": {
        "prizm-draft-picks": {
            "name": "Prizm Draft Picks",
            "sport": "basketball",
            "alternateNames": ["Panini Prizm Draft Picks"],
        },
        "prizm": {
            "name": "Prizm",
            "sport": "basketball",
            "alternateNames": ["Panini Prizm"],
            "parallels": ["Silver Prizm", "Orange Prizm", "Blue Velocity", "Fast Break Blue"],
        },
        "hoops-premium-stock": {
            "name": "Hoops Premium Stock",
            "sport": "basketball",
            "alternateNames": ["Panini Hoops Premium Stock"],
            "parallels": ["Purple Pulsar"],
        },
        "hoops": {
            "name": "Hoops",
            "sport": "basketball",
            "alternateNames": ["NBA Hoops"],
            "inserts": ["Splash", "Rainmakers"],
        },
        "topps-chrome": {
            "name": "Topps Chrome",
            "sport": "baseball",
        },
    },
    "commonParallels": ["Silver", "Gold", "Blue", "Green", "Orange", "Purple", "Refractor", "Holo"],
    "commonInserts": ["Rookie Autographs"],
    "players": {
        "basketball": ["LeBron James", "Draymond Green", "Ja Morant"],
        "baseball": ["Shohei Ohtani"],
    },
}

PURPLE_PULSAR_TITLE = "2019 Panini Hoops Premium Stock LeBron James [Purple Pulsar] #87 PSA 10"


@pytest.fixture
def set_definitions():
    """Synthetic set-definition document."""
    return SET_DEFINITIONS


@pytest.fixture
def catalog():
    """Synthetic reference catalog."""
    return load_catalog(SET_DEFINITIONS)


@pytest.fixture
def purple_pulsar_title():
    return PURPLE_PULSAR_TITLE


@pytest.fixture
def purple_pulsar_identity():
    return CardIdentity(
        sport="basketball",
        year=2019,
        set_name="hoops premium stock",
        card_number="87",
        parallel="purple pulsar",
        is_autograph=False,
        player="LeBron James",
    )


@pytest.fixture
def psa10():
    return GradeInfo(authority=GradeAuthority.PSA, numeric_grade=10.0)


def make_row(parallel: Optional[str] = "purple pulsar", **prices) -> LocalPriceRow:
    """Local price row for the 2019 Hoops Premium Stock #87 card."""
    return LocalPriceRow(
        year=2019,
        set_name="hoops premium stock",
        card_number="87",
        sport="basketball",
        parallel=parallel,
        price_by_tier=PriceByTier(**(prices or {"grade10": 12000})),
        player="LeBron James",
    )


@pytest.fixture
def price_store(tmp_path):
    """Empty SQLite local price catalog in a temp directory."""
    store = LocalPriceCatalog(tmp_path / "prices.db")
    yield store
    store.close()


@pytest.fixture
def sample_listing():
    return Listing(title=PURPLE_PULSAR_TITLE, current_price=40.0, item_id="item-1")


class FakeSource(PriceSourceBase):
    """Price source returning scripted outcomes and counting calls."""

    def __init__(self, outcomes: List, source: PriceSource = PriceSource.LOCAL_CATALOG):
        self.outcomes = list(outcomes)
        self.source = source
        self.calls = 0

    async def lookup(self, identity, grade):
        self.calls += 1
        outcome = self.outcomes[min(self.calls, len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_quote(value: float = 120.0, source: PriceSource = PriceSource.LOCAL_CATALOG) -> PriceQuote:
    return PriceQuote(
        value=value,
        source=source,
        matched_identity_description="2019 hoops premium stock #87 purple pulsar",
        confidence=Confidence.HIGH,
    )


def no_match(reason: ResolutionFailure, detail: str = "") -> NoMatch:
    return NoMatch(reason, detail)


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Mark integration tests
        if item.module.__name__ == "test_integration" or "end_to_end" in item.name.lower():
            item.add_marker(pytest.mark.integration)

        # Mark unit tests (default)
        if not item.get_closest_marker('integration') and not item.get_closest_marker('slow'):
            item.add_marker(pytest.mark.unit)
