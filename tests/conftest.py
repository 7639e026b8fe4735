"""Shared fixtures for the Market Pulse test suite."""
from datetime import date

import httpx
import pytest

from constants import Impact
from crawlers import FinnhubClient
from processor.briefing import (
    EarningsEntry,
    EconomicEvent,
    GlobalRegion,
    Headline,
    MarketSnapshot,
    Quote,
)

AS_OF = date(2026, 10, 19)
REGION_NAMES = ["London (FTSE)", "Tokyo (Nikkei)", "Hong Kong (HSI)", "Frankfurt (DAX)"]
FINNHUB_BASE = "https://finnhub.test/api/v1"


def make_snapshot(
    vix=20.0,
    spy=0.0,
    qqq=0.0,
    regions=(0.0, 0.0, 0.0, 0.0),
    gold=0.0,
    oil=0.0,
    events=(),
    earnings=(),
    headlines=(),
    as_of_date=AS_OF,
):
    """
    Build a snapshot from plain values.

    events: (name, impact) pairs; earnings: (symbol, iso date) pairs;
    headlines: strings.
    """
    return MarketSnapshot(
        vix=Quote(price=vix),
        spy=Quote(price=500.0, change_percent=spy),
        qqq=Quote(price=400.0, change_percent=qqq),
        gold=Quote(price=190.0, change_percent=gold),
        oil=Quote(price=75.0, change_percent=oil),
        global_regions=tuple(
            GlobalRegion(name=name, change_percent=change)
            for name, change in zip(REGION_NAMES, regions)
        ),
        as_of_date=as_of_date,
        economic_events_today=tuple(EconomicEvent(name=n, impact=Impact(i)) for n, i in events),
        upcoming_earnings=tuple(EarningsEntry(symbol=s, date=d) for s, d in earnings),
        recent_headlines=tuple(Headline(text=t) for t in headlines),
    )


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def finnhub_factory():
    """
    Returns a function building a FinnhubClient over an httpx.MockTransport.
    
    The caller owns the returned httpx client and must close it.
    """
    def _make(handler):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return FinnhubClient(api_key="test-token", base_url=FINNHUB_BASE, http_client=http), http
    return _make
