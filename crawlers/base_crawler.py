"""
Base Crawler - Abstract base class for all upstream fetchers
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from pathlib import Path
import json

from loguru import logger

from config import settings
from .finnhub_client import FinnhubClient


@dataclass
class CrawlResult:
    """Base result from a crawler."""
    source: str
    crawled_at: datetime
    success: bool
    data: list[dict]
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "crawled_at": self.crawled_at.isoformat(),
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "count": len(self.data)
        }


class BaseCrawler(ABC):
    """Abstract base class for all data crawlers."""

    def __init__(self, name: str, client: FinnhubClient, data_dir: Path = None):
        self.name = name
        self.client = client
        self.data_dir = data_dir or settings.DATA_DIR
        self.raw_dir = self.data_dir / "raw"

    @abstractmethod
    async def fetch(self) -> CrawlResult:
        """
        Fetch data from the source.
        Must be implemented by subclasses.
        """
        pass

    def save_raw(self, result: CrawlResult, date: Optional[datetime] = None) -> Path:
        """Save raw crawl result to JSON file."""
        if date is None:
            date = datetime.now()

        self.raw_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{self.name}_{date.strftime('%Y%m%d_%H%M%S')}.json"
        filepath = self.raw_dir / filename

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info(f"[{self.name}] Saved raw data to {filepath}")
        return filepath

    def failed(self, error: str) -> CrawlResult:
        """Build an empty, unsuccessful result."""
        return CrawlResult(
            source=self.name,
            crawled_at=datetime.now(),
            success=False,
            data=[],
            error=error
        )

    async def run(self, save_raw: bool = None) -> CrawlResult:
        """
        Run the crawler with error handling.

        Never raises: any failure becomes an unsuccessful CrawlResult with
        empty data, so callers can default the missing series.

        Args:
            save_raw: If True, also dump the result to data/raw (for debugging).
                      Defaults to settings.SAVE_RAW_RESPONSES.
        """
        if save_raw is None:
            save_raw = settings.SAVE_RAW_RESPONSES
        logger.debug(f"[{self.name}] Starting crawl...")

        try:
            result = await self.fetch()
        except Exception as e:
            logger.exception(f"[{self.name}] Unexpected error during crawl")
            return self.failed(str(e))

        if result.success:
            logger.debug(f"[{self.name}] Successfully crawled {len(result.data)} items")
            if save_raw:
                self.save_raw(result)
        else:
            logger.error(f"[{self.name}] Crawl failed: {result.error}")

        return result
