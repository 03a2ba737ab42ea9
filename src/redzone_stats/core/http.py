"""
Shared HTTP client infrastructure for upstream data providers.

Provides BaseApiClient with rate limiting, retries and error handling.
Provider clients subclass it and add endpoint-specific methods:

    class EspnNFLClient(BaseApiClient):
        BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

        async def get_games(self, season: int, week: int) -> list[ScheduledGame]:
            data = await self._get("/scoreboard", {"week": week, "dates": season})
            ...

Absolute URLs (e.g. ESPN ``$ref`` links) can be passed to ``_get`` as-is;
httpx ignores the base URL for them.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ExternalAPIError(Exception):
    """Base exception for upstream API errors."""

    def __init__(
        self,
        message: str,
        code: str = "EXTERNAL_API_ERROR",
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class RateLimitError(ExternalAPIError):
    """Exception raised when the upstream rate limit is still exceeded after retries."""

    def __init__(self, message: str, retry_after: int = 60):
        super().__init__(message, code="RATE_LIMITED", status_code=429)
        self.retry_after = retry_after


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------

class RateLimiter:
    """Simple token bucket rate limiter for async API calls."""

    def __init__(self, requests_per_minute: int = 600):
        self.delay = 60.0 / requests_per_minute
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until we can make a request."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request
            if elapsed < self.delay:
                await asyncio.sleep(self.delay - elapsed)
            self._last_request = time.monotonic()


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------

class BaseApiClient:
    """
    Async HTTP client base with rate limiting and retries.

    Use as an async context manager:

        async with EspnNFLClient() as client:
            games = await client.get_games(2024, 5)

    Transient failures (5xx, 429, transport errors) are retried up to
    ``max_retries`` attempts in total, sleeping ``retry_backoff * 2**attempt``
    seconds between attempts. Other 4xx responses fail immediately.
    """

    BASE_URL: str = ""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        requests_per_minute: int = 600,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._default_headers = headers or {}
        self._rate_limiter = RateLimiter(requests_per_minute)
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._retry_backoff = retry_backoff
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # -- Lifecycle -----------------------------------------------------------

    async def __aenter__(self) -> "BaseApiClient":
        self._client = self._build_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._default_headers,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the HTTP client, lazily creating it if needed."""
        if self._client is None or self._client.is_closed:
            self._client = self._build_client()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    # -- HTTP methods --------------------------------------------------------

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        GET a JSON document with retry logic and rate limiting.

        Raises:
            RateLimitError: If the API keeps returning 429 until retries run out
            ExternalAPIError: If the request fails after retries
        """
        last_error: Optional[ExternalAPIError] = None

        for attempt in range(self._max_retries):
            is_last = attempt == self._max_retries - 1
            try:
                await self._rate_limiter.acquire()
                response = await self.client.get(path, params=params)

                if response.status_code == 429:
                    retry_after = int(response.headers.get("retry-after", 60))
                    last_error = RateLimitError(
                        f"Rate limited on {path}, retry after {retry_after}s",
                        retry_after=retry_after,
                    )
                    if is_last:
                        break
                    wait = min(retry_after, 30) if self._retry_backoff else 0
                    logger.warning(
                        "Rate limited by API, waiting %ss (attempt %d)", wait, attempt + 1
                    )
                    await asyncio.sleep(wait)
                    continue

                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                last_error = ExternalAPIError(
                    f"HTTP {status} for {path}: {e.response.text[:200]}",
                    status_code=status,
                )
                if 400 <= status < 500:
                    raise last_error from e

            except (httpx.RequestError, ValueError) as e:
                # ValueError covers undecodable JSON bodies
                last_error = ExternalAPIError(f"Request to {path} failed: {e}")

            if not is_last:
                wait = self._retry_backoff * (2 ** attempt)
                logger.warning("Request to %s failed, retrying in %ss: %s", path, wait, last_error)
                await asyncio.sleep(wait)

        raise last_error or ExternalAPIError(f"Request to {path} failed after retries")
