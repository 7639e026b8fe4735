"""
Quote Crawler - batch Finnhub quotes

Fetches many symbols concurrently. A failing symbol does not fail the
batch: it is reported as `{"symbol": ..., "error": True}` and the batch
succeeds as long as one quote came back.
"""
import asyncio
from datetime import datetime
from typing import Iterable, Optional

from loguru import logger

from .base_crawler import BaseCrawler, CrawlResult
from .finnhub_client import FinnhubClient, FinnhubError


def normalize_quote(symbol: str, raw: dict) -> dict:
    """Map Finnhub's single-letter quote fields to readable names."""
    return {
        "symbol": symbol.upper(),
        "price": raw.get("c"),
        "change": raw.get("d"),
        "changePercent": raw.get("dp"),
        "high": raw.get("h"),
        "low": raw.get("l"),
        "open": raw.get("o"),
        "previousClose": raw.get("pc"),
        "timestamp": raw.get("t"),
    }


def has_price(quote: Optional[dict]) -> bool:
    """Finnhub answers unknown symbols with c == 0."""
    return bool(quote) and not quote.get("error") and bool(quote.get("price"))


class QuoteCrawler(BaseCrawler):
    """Crawler for a fixed list of quote symbols."""

    def __init__(self, client: FinnhubClient, symbols: Iterable[str], name: str = "quotes"):
        super().__init__(name, client)
        self.symbols = [s.upper() for s in symbols]

    async def _fetch_one(self, symbol: str) -> dict:
        try:
            raw = await self.client.quote(symbol)
        except FinnhubError as e:
            logger.warning(f"[{self.name}] {symbol}: {e}")
            return {"symbol": symbol, "error": True}
        if not isinstance(raw, dict):
            logger.warning(f"[{self.name}] {symbol}: unexpected quote payload {type(raw).__name__}")
            return {"symbol": symbol, "error": True}
        return normalize_quote(symbol, raw)

    async def fetch(self) -> CrawlResult:
        quotes = await asyncio.gather(*(self._fetch_one(s) for s in self.symbols))
        failed = [q["symbol"] for q in quotes if q.get("error")]

        return CrawlResult(
            source=self.name,
            crawled_at=datetime.now(),
            success=len(failed) < len(quotes),
            data=list(quotes),
            error=f"No quote for: {', '.join(failed)}" if failed else None,
        )

    @staticmethod
    def by_symbol(result: CrawlResult) -> dict[str, dict]:
        """Index successful quotes by symbol."""
        return {q["symbol"]: q for q in result.data if not q.get("error")}
