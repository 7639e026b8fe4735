"""
Finnhub Client - thin async wrapper around the Finnhub REST API

Data source: https://finnhub.io/api/v1

Every call appends the API token, raises FinnhubError on HTTP failures
or on an `{"error": ...}` body, and returns the decoded JSON untouched.
Normalization is the crawlers' job.
"""
from datetime import date
from typing import Any, Optional

import httpx
from loguru import logger

from config import settings


class FinnhubError(Exception):
    """Upstream request failed or returned an error payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FinnhubClient:
    """
    Async Finnhub REST client.

    Use as an async context manager so the underlying httpx client is
    closed. An existing httpx.AsyncClient may be injected (tests use one
    backed by httpx.MockTransport); injected clients are not closed here.
    """

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        timeout: float = None,
        http_client: httpx.AsyncClient = None,
    ):
        self.api_key = api_key if api_key is not None else settings.FINNHUB_API_KEY
        self.base_url = (base_url or settings.FINNHUB_REST_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
        self._owns_client = http_client is None
        self._client = http_client

    async def __aenter__(self) -> "FinnhubClient":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                verify=settings.CRAWLERS_ENABLE_SSL,
                headers={"User-Agent": "MarketPulse/1.0"},
            )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json(self, path: str, **params) -> Any:
        """GET {base_url}{path} with the token attached and return decoded JSON."""
        if self._client is None:
            raise RuntimeError("FinnhubClient used outside of 'async with'")

        query = {k: v for k, v in params.items() if v is not None}
        query["token"] = self.api_key
        url = f"{self.base_url}{path}"

        try:
            response = await self._client.get(url, params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"[finnhub] {path} returned HTTP {e.response.status_code}")
            raise FinnhubError(f"HTTP {e.response.status_code} from {path}", e.response.status_code) from e
        except httpx.TimeoutException as e:
            logger.warning(f"[finnhub] {path} timed out")
            raise FinnhubError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"[finnhub] {path} failed: {e}")
            raise FinnhubError(f"Request to {path} failed: {e}") from e
        except ValueError as e:
            raise FinnhubError(f"Invalid JSON from {path}") from e

        if isinstance(data, dict) and data.get("error"):
            raise FinnhubError(str(data["error"]), response.status_code)
        return data

    # ============================================================
    # Endpoints
    # ============================================================

    async def quote(self, symbol: str) -> dict:
        return await self.get_json("/quote", symbol=symbol.upper())

    async def profile(self, symbol: str) -> dict:
        return await self.get_json("/stock/profile2", symbol=symbol.upper())

    async def general_news(self, category: str = "general") -> list:
        return await self.get_json("/news", category=category)

    async def company_news(self, symbol: str, start: date, end: date) -> list:
        return await self.get_json(
            "/company-news",
            symbol=symbol.upper(),
            **{"from": start.isoformat(), "to": end.isoformat()},
        )

    async def market_status(self, exchange: str = "US") -> dict:
        return await self.get_json("/stock/market-status", exchange=exchange)

    async def search(self, query: str) -> dict:
        return await self.get_json("/search", q=query)

    async def earnings_calendar(self, start: date, end: date) -> dict:
        return await self.get_json(
            "/calendar/earnings",
            **{"from": start.isoformat(), "to": end.isoformat()},
        )

    async def economic_calendar(self) -> Any:
        return await self.get_json("/calendar/economic")
