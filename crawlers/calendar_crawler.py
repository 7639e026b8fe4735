"""
Calendar Crawler - Finnhub economic calendar

Finnhub has shipped two shapes for this endpoint: a bare list of events
with a `date` field, and `{"economicCalendar": [...]}` with a `time`
timestamp. Both are accepted.
"""
from datetime import datetime
from typing import Optional

from constants.market_symbols import EVENT_CATEGORY_KEYWORDS, DEFAULT_EVENT_CATEGORY
from .base_crawler import BaseCrawler, CrawlResult
from .finnhub_client import FinnhubClient, FinnhubError


def categorize_event(event_name: str) -> str:
    """Bucket an event name into a coarse category (Employment, Inflation, ...)."""
    name = (event_name or "").lower()
    for category, keywords in EVENT_CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return DEFAULT_EVENT_CATEGORY


def normalize_event(raw: dict) -> dict:
    event_date = raw.get("date") or (raw.get("time") or "")[:10]
    return {
        "date": event_date,
        "event": raw.get("event") or "",
        "country": raw.get("country"),
        "impact": (raw.get("impact") or "").lower() or None,
        "actual": raw.get("actual"),
        "estimate": raw.get("estimate"),
        "previous": raw.get("previous", raw.get("prev")),
        "unit": raw.get("unit") or "",
    }


class CalendarCrawler(BaseCrawler):
    """Crawler for economic calendar events, filtered to one country."""

    def __init__(self, client: FinnhubClient, country: Optional[str] = "US"):
        super().__init__("calendar", client)
        self.country = country

    async def fetch(self) -> CrawlResult:
        try:
            raw = await self.client.economic_calendar()
        except FinnhubError as e:
            return self.failed(str(e))

        if isinstance(raw, dict):
            raw = raw.get("economicCalendar")
        if not isinstance(raw, list):
            return self.failed("Economic calendar payload is not a list")

        events = [
            normalize_event(e) for e in raw
            if isinstance(e, dict) and (self.country is None or e.get("country") == self.country)
        ]
        events.sort(key=lambda e: e["date"])

        return CrawlResult(
            source=self.name,
            crawled_at=datetime.now(),
            success=True,
            data=events,
        )
