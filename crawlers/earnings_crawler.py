"""
Earnings Crawler - Finnhub earnings calendar, filtered to mega-caps
"""
from datetime import date, datetime
from typing import Iterable

from constants import MEGA_CAPS
from .base_crawler import BaseCrawler, CrawlResult
from .finnhub_client import FinnhubClient, FinnhubError


def normalize_earning(raw: dict) -> dict:
    return {
        "symbol": raw.get("symbol"),
        "name": raw.get("name"),
        "date": raw.get("date"),
        "epsEstimate": str(raw["epsEstimate"]) if raw.get("epsEstimate") else None,
        "epsActual": str(raw["epsActual"]) if raw.get("epsActual") else None,
        "time": "bmo" if raw.get("hour") == "bmo" else "amc",
        "quarter": raw.get("quarter"),
        "year": raw.get("year"),
    }


class EarningsCrawler(BaseCrawler):
    """Crawler for upcoming earnings between `start` and `end`."""

    def __init__(
        self,
        client: FinnhubClient,
        start: date,
        end: date,
        allow_list: Iterable[str] = MEGA_CAPS,
    ):
        super().__init__("earnings", client)
        self.start = start
        self.end = end
        self.allow_list = {s.upper() for s in allow_list}

    async def fetch(self) -> CrawlResult:
        try:
            raw = await self.client.earnings_calendar(self.start, self.end)
        except FinnhubError as e:
            return self.failed(str(e))

        calendar = raw.get("earningsCalendar") if isinstance(raw, dict) else None
        if not calendar:
            # No reports in range is a valid answer
            calendar = []

        earnings = [
            normalize_earning(e) for e in calendar
            if isinstance(e, dict) and (e.get("symbol") or "").upper() in self.allow_list
        ]
        return CrawlResult(
            source=self.name,
            crawled_at=datetime.now(),
            success=True,
            data=earnings,
        )
