"""
News Crawler - Finnhub market and company news
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .base_crawler import BaseCrawler, CrawlResult
from .finnhub_client import FinnhubClient, FinnhubError


def normalize_article(article: dict) -> dict:
    """Map a Finnhub news item to the facade's article shape."""
    published = article.get("datetime")
    return {
        "headline": article.get("headline") or "",
        "source": article.get("source"),
        "url": article.get("url"),
        "thumbnail": article.get("image") or None,
        "timestamp": (
            datetime.fromtimestamp(published, tz=timezone.utc).isoformat()
            if published else None
        ),
        "summary": article.get("summary") or "",
    }


class NewsCrawler(BaseCrawler):
    """
    Crawler for financial news.
    
    With no symbol, pulls the general market feed; with a symbol, pulls
    that company's news for the last `lookback_days` days.
    """

    def __init__(
        self,
        client: FinnhubClient,
        symbol: Optional[str] = None,
        limit: int = 20,
        category: str = "general",
        lookback_days: int = 7,
        today: Optional[date] = None,
    ):
        super().__init__(f"news_{symbol.lower()}" if symbol else "news", client)
        self.symbol = symbol
        self.limit = limit
        self.category = category
        self.lookback_days = lookback_days
        self.today = today

    async def fetch(self) -> CrawlResult:
        try:
            if self.symbol:
                end = self.today or date.today()
                start = end - timedelta(days=self.lookback_days)
                raw = await self.client.company_news(self.symbol, start, end)
            else:
                raw = await self.client.general_news(self.category)
        except FinnhubError as e:
            return self.failed(str(e))

        if not isinstance(raw, list):
            return self.failed(f"Unexpected news payload: {type(raw).__name__}")

        articles = [normalize_article(a) for a in raw[:self.limit] if isinstance(a, dict)]
        return CrawlResult(
            source=self.name,
            crawled_at=datetime.now(),
            success=True,
            data=articles,
        )
