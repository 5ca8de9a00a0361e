"""Rate-limited aiohttp client base shared by the collaborator clients."""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from ..core.constants import BACKOFF_S, RETRYABLE_STATUS
from .error_handler import SourceUnavailableError
from .log import LoggerMixin


class RateLimitedClient(LoggerMixin):
    """
    Holds one lazily created session, spaces calls by ``min_request_interval``
    and retries 429/5xx responses on the ``BACKOFF_S`` schedule.

    Any transport failure, timeout or final error status surfaces as
    ``SourceUnavailableError`` so callers see a single failure type.
    """

    source_name = "http"

    def __init__(
        self,
        base_url: str,
        min_request_interval: float = 0.5,
        timeout_s: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.min_request_interval = min_request_interval
        self.timeout_s = timeout_s
        self.headers = headers or {}
        self.session: Optional[aiohttp.ClientSession] = None
        self.last_request_time = 0.0
        self._rate_lock = asyncio.Lock()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_s),
            )

    async def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        async with self._rate_lock:
            loop = asyncio.get_running_loop()
            time_since_last = loop.time() - self.last_request_time
            if time_since_last < self.min_request_interval:
                await asyncio.sleep(self.min_request_interval - time_since_last)
            self.last_request_time = loop.time()

    async def _request_with_backoff(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        expect: str = "json",
    ) -> Any:
        """Make an HTTP request with backoff for retryable errors."""
        await self._ensure_session()

        last_error: Optional[BaseException] = None
        for attempt, delay in enumerate([0.0, *BACKOFF_S]):
            if delay > 0:
                await asyncio.sleep(delay)
            await self._rate_limit()

            try:
                async with self.session.request(method, url, params=params, data=data, headers=headers) as response:
                    if response.status in RETRYABLE_STATUS and attempt < len(BACKOFF_S):
                        self.logger.warning(
                            "Retryable status", source=self.source_name, status=response.status, attempt=attempt + 1
                        )
                        continue
                    response.raise_for_status()
                    if expect == "text":
                        return await response.text()
                    return await response.json(content_type=None)
            except aiohttp.ClientResponseError as e:
                last_error = e
                if e.status in RETRYABLE_STATUS and attempt < len(BACKOFF_S):
                    continue
                raise SourceUnavailableError(
                    f"{self.source_name} returned HTTP {e.status}",
                    details={"url": url, "status": e.status},
                ) from e
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                if attempt < len(BACKOFF_S):
                    continue
                raise SourceUnavailableError(
                    f"{self.source_name} request failed",
                    details={"url": url, "error": str(e) or type(e).__name__},
                ) from e

        raise SourceUnavailableError(
            f"{self.source_name} retries exhausted",
            details={"url": url, "error": str(last_error) if last_error else None},
        )

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
