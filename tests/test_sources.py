"""Tests for the individual price sources."""

from unittest.mock import AsyncMock, Mock

import pytest

from cardsnipe.core.types import (
    CatalogProduct,
    GradeInfo,
    PriceByTier,
    PriceQuote,
    PriceSource,
    PriceTier,
    ResolutionFailure,
)
from cardsnipe.pricing.sold_sales import SoldSale
from cardsnipe.resolve.sources import (
    ExternalCatalogSource,
    LocalCatalogSource,
    ScrapedSalesSource,
    to_catalog_entry,
)

from conftest import make_row

CONSOLE = "Basketball Cards 2019 Panini Hoops Premium Stock"
TITLE = "2019 Panini Hoops Premium Stock LeBron James Purple Pulsar #87"


def product(name, grade10=15000, loose=3000):
    return CatalogProduct(
        console_name=CONSOLE,
        product_name=name,
        price_by_tier=PriceByTier(loose=loose, grade10=grade10),
        product_url=f"https://www.sportscardspro.com/game/{name}",
    )


class TestLocalCatalogSource:
    """Test LocalCatalogSource class."""

    @pytest.mark.asyncio
    async def test_empty_store_is_unavailable(self, price_store, catalog, purple_pulsar_identity, psa10):
        result = await LocalCatalogSource(price_store, catalog).lookup(purple_pulsar_identity, psa10)
        assert result.reason is ResolutionFailure.SOURCE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_exact_row_quoted(self, price_store, catalog, purple_pulsar_identity, psa10):
        price_store.insert_rows([make_row(parallel=None, grade10=3000), make_row()])

        result = await LocalCatalogSource(price_store, catalog).lookup(purple_pulsar_identity, psa10)

        assert isinstance(result, PriceQuote)
        assert result.value == 120.0
        assert result.price_tier is PriceTier.GRADE_10
        assert result.source is PriceSource.LOCAL_CATALOG

    @pytest.mark.asyncio
    async def test_color_only_row_rejected(self, price_store, catalog, purple_pulsar_identity, psa10):
        price_store.insert_rows([make_row(parallel="purple")])

        result = await LocalCatalogSource(price_store, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.reason is ResolutionFailure.NO_CANDIDATE_MATCH

    @pytest.mark.asyncio
    async def test_matched_row_without_price(self, price_store, catalog, purple_pulsar_identity, psa10):
        price_store.insert_rows([make_row(grade9=5000)])

        result = await LocalCatalogSource(price_store, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.reason is ResolutionFailure.NO_PRICE_DATA

    @pytest.mark.asyncio
    async def test_falls_back_to_loose_price(self, price_store, catalog, purple_pulsar_identity, psa10):
        price_store.insert_rows([make_row(loose=2500)])

        result = await LocalCatalogSource(price_store, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.value == 25.0
        assert result.price_tier is PriceTier.LOOSE


class TestExternalCatalogSource:
    """Test ExternalCatalogSource class."""

    @pytest.fixture
    def client(self):
        client = Mock()
        client.is_configured.return_value = True
        client.search_products = AsyncMock()
        return client

    def test_to_catalog_entry(self, catalog, purple_pulsar_identity):
        entry = to_catalog_entry(product("LeBron James [Purple Pulsar] #87"), catalog)
        assert entry.parsed_identity == purple_pulsar_identity

    @pytest.mark.asyncio
    async def test_unconfigured_client(self, client, catalog, purple_pulsar_identity, psa10):
        client.is_configured.return_value = False

        result = await ExternalCatalogSource(client, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.reason is ResolutionFailure.SOURCE_UNAVAILABLE
        client.search_products.assert_not_called()

    @pytest.mark.asyncio
    async def test_first_matching_candidate_wins(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_products.return_value = [
            product("LeBron James [Purple] #87", grade10=4000),
            product("LeBron James [Purple Pulsar] #87", grade10=15000),
            product("LeBron James [Purple Pulsar] #87", grade10=99900),
        ]

        result = await ExternalCatalogSource(client, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.value == 150.0
        assert result.source is PriceSource.EXTERNAL_CATALOG_API
        assert result.source_url.endswith("LeBron James [Purple Pulsar] #87")
        client.search_products.assert_awaited_once_with(
            "2019 LeBron James hoops premium stock purple pulsar #87"
        )

    @pytest.mark.asyncio
    async def test_candidates_beyond_limit_ignored(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_products.return_value = [
            product("LeBron James [Purple] #87"),
            product("LeBron James [Purple Pulsar] #87"),
        ]

        result = await ExternalCatalogSource(client, catalog, candidate_limit=1).lookup(
            purple_pulsar_identity, psa10
        )

        assert result.reason is ResolutionFailure.NO_CANDIDATE_MATCH

    @pytest.mark.asyncio
    async def test_client_errors_propagate(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_products.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await ExternalCatalogSource(client, catalog).lookup(purple_pulsar_identity, psa10)


class TestScrapedSalesSource:
    """Test ScrapedSalesSource class."""

    @pytest.fixture
    def client(self):
        client = Mock()
        client.search_sales = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_trimmed_mean_of_matching_sales(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_sales.return_value = [
            SoldSale(f"{TITLE} PSA 10", 100.0, "2024-02-01"),
            SoldSale(f"{TITLE} PSA 10 GEM MINT", 120.0, "2024-02-02"),
            SoldSale(f"{TITLE} PSA 10", 140.0, "2024-02-03"),
            SoldSale(f"{TITLE} PSA 9", 60.0, "2024-02-03"),
            SoldSale("2019 Panini Hoops Premium Stock LeBron James Purple #87 PSA 10", 45.0, "2024-02-04"),
        ]

        result = await ScrapedSalesSource(client, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.value == 120.0
        assert result.sample_size == 3
        assert result.price_tier is PriceTier.GRADE_10
        client.search_sales.assert_awaited_once_with(
            "2019 LeBron James hoops premium stock purple pulsar #87 PSA 10"
        )

    @pytest.mark.asyncio
    async def test_too_few_samples(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_sales.return_value = [SoldSale(f"{TITLE} PSA 10", 100.0, "2024-02-01")]

        result = await ScrapedSalesSource(client, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.reason is ResolutionFailure.NO_CANDIDATE_MATCH
        assert "1 matching sale(s)" in result.detail

    @pytest.mark.asyncio
    async def test_raw_listing_ignores_graded_sales(self, client, catalog, purple_pulsar_identity):
        client.search_sales.return_value = [
            SoldSale(f"{TITLE} PSA 10", 100.0, "2024-02-01"),
            SoldSale(TITLE, 30.0, "2024-02-01"),
            SoldSale(TITLE, 32.0, "2024-02-02"),
            SoldSale(TITLE, 34.0, "2024-02-03"),
        ]

        result = await ScrapedSalesSource(client, catalog).lookup(purple_pulsar_identity, GradeInfo.raw())

        assert result.value == 32.0
        assert result.price_tier is PriceTier.LOOSE

    @pytest.mark.asyncio
    async def test_no_sales(self, client, catalog, purple_pulsar_identity, psa10):
        client.search_sales.return_value = []

        result = await ScrapedSalesSource(client, catalog).lookup(purple_pulsar_identity, psa10)

        assert result.reason is ResolutionFailure.NO_CANDIDATE_MATCH
