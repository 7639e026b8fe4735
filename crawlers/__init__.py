"""Crawlers package for Market Pulse Dashboard."""

from .base_crawler import BaseCrawler, CrawlResult
from .finnhub_client import FinnhubClient, FinnhubError
from .quote_crawler import QuoteCrawler
from .news_crawler import NewsCrawler
from .calendar_crawler import CalendarCrawler
from .earnings_crawler import EarningsCrawler

__all__ = [
    "BaseCrawler",
    "CrawlResult",
    "FinnhubClient",
    "FinnhubError",
    "QuoteCrawler",
    "NewsCrawler",
    "CalendarCrawler",
    "EarningsCrawler",
]
