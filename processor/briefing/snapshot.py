"""
Snapshot assembly - the boundary between unreliable upstream data and the
pure scorer.

Two ways in:
- SnapshotAssembler.assemble(): fetch every series concurrently, default
  whatever failed, fix the "today" date once.
- snapshot_from_payload(): validate a client-supplied JSON snapshot.

Either way the scorer only ever sees a fully populated MarketSnapshot.
"""
import asyncio
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Any, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from config import settings
from constants import (
    Impact,
    BRIEFING_GLOBAL_REGIONS,
    MAX_BRIEFING_EARNINGS,
    MAX_BRIEFING_HEADLINES,
)
from constants.market_symbols import (
    VIX_SYMBOL,
    SPY_SYMBOL,
    QQQ_SYMBOL,
    GOLD_SYMBOL,
    OIL_SYMBOL,
)
from crawlers import (
    FinnhubClient,
    QuoteCrawler,
    NewsCrawler,
    CalendarCrawler,
    EarningsCrawler,
)
from .models import (
    EarningsEntry,
    EconomicEvent,
    GlobalRegion,
    Headline,
    MarketSnapshot,
    Quote,
    SnapshotValidationError,
)

EARNINGS_WINDOW_DAYS = 7


def market_today(tz_name: str = None) -> date:
    """Calendar date in the market's timezone."""
    return datetime.now(ZoneInfo(tz_name or settings.MARKET_TIMEZONE)).date()


def as_float(value: Any) -> float:
    """Missing, null, non-numeric and non-finite upstream numbers all count as 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def headline_text(article: dict) -> str:
    return f"{article.get('headline') or ''} {article.get('summary') or ''}"


# ============================================================
# Upstream assembly
# ============================================================

@dataclass
class AssembledSnapshot:
    """Snapshot plus what the API echoes back about its inputs."""
    snapshot: MarketSnapshot
    data: dict
    failed_sources: list[str] = field(default_factory=list)


class SnapshotAssembler:
    """
    Fetches every briefing input in parallel and builds a MarketSnapshot.

    Each source is independent: a failed source contributes zeros/empties
    and its name is recorded in `failed_sources`.
    """

    def __init__(self, client: FinnhubClient):
        self.client = client

    async def assemble(self, as_of_date: Optional[date] = None) -> AssembledSnapshot:
        """
        Build the snapshot for `as_of_date` (defaults to today in the
        market timezone). The date is fixed here once and used for both the
        calendar and the earnings comparisons.
        """
        as_of_date = as_of_date or market_today()
        region_symbols = [r["symbol"] for r in BRIEFING_GLOBAL_REGIONS]

        quotes_crawler = QuoteCrawler(
            self.client,
            [VIX_SYMBOL, SPY_SYMBOL, QQQ_SYMBOL, GOLD_SYMBOL, OIL_SYMBOL, *region_symbols],
        )
        calendar_crawler = CalendarCrawler(self.client, country="US")
        earnings_crawler = EarningsCrawler(
            self.client, as_of_date, as_of_date + timedelta(days=EARNINGS_WINDOW_DAYS)
        )
        news_crawler = NewsCrawler(self.client, limit=MAX_BRIEFING_HEADLINES)

        quotes_result, calendar_result, earnings_result, news_result = await asyncio.gather(
            quotes_crawler.run(),
            calendar_crawler.run(),
            earnings_crawler.run(),
            news_crawler.run(),
        )

        failed_sources = [
            r.source for r in (quotes_result, calendar_result, earnings_result, news_result)
            if not r.success
        ]
        if failed_sources:
            logger.warning(f"[briefing] Defaulting failed sources: {', '.join(failed_sources)}")

        quotes = QuoteCrawler.by_symbol(quotes_result)

        def quote_for(symbol: str) -> Quote:
            raw = quotes.get(symbol, {})
            return Quote(price=as_float(raw.get("price")), change_percent=as_float(raw.get("changePercent")))

        today = as_of_date.isoformat()
        events_today = [
            e for e in calendar_result.data
            if e.get("country") == "US" and e.get("date") == today
        ]
        high_impact_today = [e for e in events_today if e.get("impact") == Impact.HIGH.value]
        earnings = earnings_result.data[:MAX_BRIEFING_EARNINGS]
        articles = news_result.data[:MAX_BRIEFING_HEADLINES]

        regions = tuple(
            GlobalRegion(
                name=r["name"],
                change_percent=quote_for(r["symbol"]).change_percent,
            )
            for r in BRIEFING_GLOBAL_REGIONS
        )

        snapshot = MarketSnapshot(
            vix=quote_for(VIX_SYMBOL),
            spy=quote_for(SPY_SYMBOL),
            qqq=quote_for(QQQ_SYMBOL),
            gold=quote_for(GOLD_SYMBOL),
            oil=quote_for(OIL_SYMBOL),
            global_regions=regions,
            as_of_date=as_of_date,
            economic_events_today=tuple(
                EconomicEvent(name=e.get("event") or "", impact=_impact_or_low(e.get("impact")))
                for e in events_today
            ),
            upcoming_earnings=tuple(
                EarningsEntry(symbol=e.get("symbol") or "", date=e.get("date") or "")
                for e in earnings
            ),
            recent_headlines=tuple(Headline(text=headline_text(a)) for a in articles),
        )

        data = {
            "vix": _echo_quote(quotes.get(VIX_SYMBOL)),
            "spy": _echo_quote(quotes.get(SPY_SYMBOL)),
            "qqq": _echo_quote(quotes.get(QQQ_SYMBOL)),
            "gold": _echo_quote(quotes.get(GOLD_SYMBOL), with_change=False),
            "oil": _echo_quote(quotes.get(OIL_SYMBOL), with_change=False),
            "global": {
                r["key"]: {"changePercent": quote_for(r["symbol"]).change_percent}
                for r in BRIEFING_GLOBAL_REGIONS
            },
            "todaysEvents": [{"event": e.get("event"), "impact": e.get("impact")} for e in high_impact_today],
            "upcomingEarnings": [{"symbol": e.get("symbol"), "date": e.get("date")} for e in earnings],
        }

        return AssembledSnapshot(snapshot=snapshot, data=data, failed_sources=failed_sources)


def _impact_or_low(value: Optional[str]) -> Impact:
    try:
        return Impact(value)
    except ValueError:
        return Impact.LOW


def _echo_quote(raw: Optional[dict], with_change: bool = True) -> dict:
    raw = raw or {}
    echoed = {"price": as_float(raw.get("price"))}
    if with_change:
        echoed["change"] = as_float(raw.get("change"))
    echoed["changePercent"] = as_float(raw.get("changePercent"))
    return echoed


# ============================================================
# Client-supplied snapshots
# ============================================================

QUOTE_FIELDS = ("vix", "spy", "qqq", "gold", "oil")


def _require(condition: bool, message: str):
    if not condition:
        raise SnapshotValidationError(message)


def _number(value: Any, path: str) -> float:
    """Missing/null -> 0.0; anything that is not a finite real number is rejected."""
    if value is None:
        return 0.0
    _require(isinstance(value, Real) and not isinstance(value, bool), f"{path} must be a number")
    try:
        number = float(value)
    except OverflowError:
        raise SnapshotValidationError(f"{path} is out of range") from None
    _require(math.isfinite(number), f"{path} must be a finite number")
    return number


def _string(value: Any, path: str) -> str:
    _require(isinstance(value, str), f"{path} must be a string")
    return value


def _list(value: Any, path: str) -> list:
    if value is None:
        return []
    _require(isinstance(value, list), f"{path} must be a list")
    return value


def _quote(value: Any, path: str) -> Quote:
    if value is None:
        return Quote()
    _require(isinstance(value, dict), f"{path} must be an object")
    return Quote(
        price=_number(value.get("price"), f"{path}.price"),
        change_percent=_number(value.get("changePercent"), f"{path}.changePercent"),
    )


def _iso_date(value: Any, path: str) -> str:
    text = _string(value, path)
    try:
        date.fromisoformat(text)
    except ValueError:
        raise SnapshotValidationError(f"{path} must be an ISO date (YYYY-MM-DD)") from None
    return text


def snapshot_from_payload(payload: Any, default_date: Optional[date] = None) -> MarketSnapshot:
    """
    Validate a camelCase JSON snapshot and build a MarketSnapshot.

    Args:
        payload: Decoded JSON object (vix, spy, qqq, gold, oil, globalRegions,
                 economicEventsToday, upcomingEarnings, recentHeadlines, asOfDate)
        default_date: Used when asOfDate is absent (defaults to market today)

    Raises:
        SnapshotValidationError: on any wrong type or shape
    """
    _require(isinstance(payload, dict), "snapshot must be an object")

    quotes = {name: _quote(payload.get(name), name) for name in QUOTE_FIELDS}

    raw_regions = _list(payload.get("globalRegions"), "globalRegions")
    _require(len(raw_regions) == 4, f"globalRegions must hold exactly 4 regions, got {len(raw_regions)}")
    regions = []
    for i, region in enumerate(raw_regions):
        path = f"globalRegions[{i}]"
        _require(isinstance(region, dict), f"{path} must be an object")
        regions.append(GlobalRegion(
            name=_string(region.get("name"), f"{path}.name"),
            change_percent=_number(region.get("changePercent"), f"{path}.changePercent"),
        ))

    events = []
    for i, event in enumerate(_list(payload.get("economicEventsToday"), "economicEventsToday")):
        path = f"economicEventsToday[{i}]"
        _require(isinstance(event, dict), f"{path} must be an object")
        impact = _string(event.get("impact"), f"{path}.impact").lower()
        _require(impact in {i.value for i in Impact}, f"{path}.impact must be one of low, medium, high")
        events.append(EconomicEvent(name=_string(event.get("name"), f"{path}.name"), impact=Impact(impact)))

    earnings = []
    for i, entry in enumerate(_list(payload.get("upcomingEarnings"), "upcomingEarnings")):
        path = f"upcomingEarnings[{i}]"
        _require(isinstance(entry, dict), f"{path} must be an object")
        earnings.append(EarningsEntry(
            symbol=_string(entry.get("symbol"), f"{path}.symbol"),
            date=_iso_date(entry.get("date"), f"{path}.date"),
        ))

    headlines = []
    for i, headline in enumerate(_list(payload.get("recentHeadlines"), "recentHeadlines")):
        path = f"recentHeadlines[{i}]"
        if isinstance(headline, str):
            headlines.append(Headline(text=headline))
            continue
        _require(isinstance(headline, dict), f"{path} must be an object or a string")
        headlines.append(Headline(text=_string(headline.get("text"), f"{path}.text")))

    raw_date = payload.get("asOfDate")
    if raw_date is None:
        as_of_date = default_date or market_today()
    else:
        as_of_date = date.fromisoformat(_iso_date(raw_date, "asOfDate"))

    return MarketSnapshot(
        **quotes,
        global_regions=tuple(regions),
        as_of_date=as_of_date,
        economic_events_today=tuple(events),
        upcoming_earnings=tuple(earnings[:MAX_BRIEFING_EARNINGS]),
        recent_headlines=tuple(headlines[:MAX_BRIEFING_HEADLINES]),
    )
