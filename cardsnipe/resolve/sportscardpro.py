"""SportsCardsPro (PriceCharting) products API client."""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..core.types import CardIdentity, CatalogProduct, PriceByTier
from ..utils.error_handler import ConfigurationError
from ..utils.http import RateLimitedClient

BASE_URL = "https://www.pricecharting.com"
PRODUCT_PAGE = "https://www.sportscardspro.com/game"


def _cents(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def product_from_payload(product: Dict[str, Any]) -> CatalogProduct:
    """Map one API product to a CatalogProduct. Prices stay in cents."""
    console = str(product.get("console-name") or "")
    name = str(product.get("product-name") or "")
    url = product.get("product-url")
    if not url and console and name:
        url = f"{PRODUCT_PAGE}/{quote(console)}/{quote(name)}"
    return CatalogProduct(
        console_name=console,
        product_name=name,
        price_by_tier=PriceByTier(
            loose=_cents(product.get("loose-price")),
            grade8=_cents(product.get("new-price")),
            grade9=_cents(product.get("graded-price")),
            grade10=_cents(product.get("manual-only-price")) or _cents(product.get("bgs-10-price")),
        ),
        product_url=url,
        product_id=str(product["id"]) if product.get("id") is not None else None,
    )


def build_query(identity: CardIdentity) -> str:
    """Year, player, set, parallel and card number, e.g. ``2019 LeBron James hoops premium stock purple pulsar #87``."""
    parts: List[str] = []
    if identity.year:
        parts.append(str(identity.year))
    if identity.player:
        parts.append(identity.player)
    if identity.set_name:
        parts.append(identity.set_name)
    if identity.parallel:
        parts.append(identity.parallel)
    if identity.card_number:
        parts.append(f"#{identity.card_number}")
    return " ".join(parts)


class SportsCardProClient(RateLimitedClient):
    """Ranked product search against the products endpoint."""

    source_name = "sportscardpro"

    def __init__(self, token: Optional[str], min_request_interval: float = 0.5, timeout_s: float = 10.0):
        super().__init__(
            BASE_URL,
            min_request_interval=min_request_interval,
            timeout_s=timeout_s,
            headers={"Accept": "application/json"},
        )
        self.token = token

    def is_configured(self) -> bool:
        return bool(self.token)

    async def search_products(self, query: str) -> List[CatalogProduct]:
        """Return products in the API's ranking order."""
        if not self.is_configured():
            raise ConfigurationError("SPORTSCARDPRO_TOKEN not configured")

        context = self.log_start("search_products", query=query)
        data = await self._request_with_backoff(
            "GET", f"{self.base_url}/api/products", params={"t": self.token, "q": query}
        )
        raw = data.get("products") if isinstance(data, dict) else None
        products = [product_from_payload(p) for p in (raw or []) if isinstance(p, dict)]
        self.log_success(context, results=len(products))
        return products
