"""130point sold-listing scraper.

130point aggregates eBay sold listings. Each row of its sales table is a
sold title, a price and a date; the caller decides which rows describe the
card being priced.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from ..core.constants import SALES_TRIM_FRACTION
from ..utils.http import RateLimitedClient

BASE_URL = "https://130point.com"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class SoldSale:
    """One sold listing."""
    title: str
    price: float
    sold_date: str


def _parse_price(text: str) -> Optional[float]:
    cleaned = text.replace("$", "").replace(",", "").strip()
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if value > 0 else None


def parse_sales_table(html: str) -> List[SoldSale]:
    """Extract (title, price, date) rows from the sales table. Unpriced rows are skipped."""
    soup = BeautifulSoup(html, "html.parser")
    sales = []
    for row in soup.select("table tbody tr"):
        cells = row.find_all("td")
        if len(cells) < 3:
            continue
        price = _parse_price(cells[1].get_text(strip=True))
        if price is None:
            continue
        sales.append(SoldSale(
            title=cells[0].get_text(" ", strip=True),
            price=price,
            sold_date=cells[2].get_text(strip=True),
        ))
    return sales


def trimmed_mean(values: Sequence[float], fraction: float = SALES_TRIM_FRACTION) -> Optional[float]:
    """
    Mean after dropping ``fraction`` of the values from each end.

    Examples:
        >>> trimmed_mean([1, 10, 10, 10, 10, 10, 10, 10, 10, 100])
        10.0
        >>> trimmed_mean([]) is None
        True
    """
    if not values:
        return None
    ordered = sorted(values)
    cut = int(math.floor(len(ordered) * fraction))
    kept = ordered[cut:len(ordered) - cut] or ordered
    return round(sum(kept) / len(kept), 2)


class Sales130PointClient(RateLimitedClient):
    """Fetches sold listings for a free-text query."""

    source_name = "130point"

    def __init__(self, min_request_interval: float = 0.5, timeout_s: float = 10.0):
        super().__init__(
            BASE_URL,
            min_request_interval=min_request_interval,
            timeout_s=timeout_s,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )

    async def search_sales(self, query: str) -> List[SoldSale]:
        context = self.log_start("search_sales", query=query)
        html = await self._request_with_backoff(
            "GET", f"{self.base_url}/sales/", params={"search": query}, expect="text"
        )
        sales = parse_sales_table(html)
        self.log_success(context, sales_found=len(sales))
        return sales
