"""
API Routes - All endpoint definitions for Market Pulse Dashboard

Endpoints organized by:
- Health Check
- Daily Briefing (composite sentiment score)
- Quotes (single, futures, batch indices/sectors/global/commodities)
- News (market, company)
- Calendars (earnings, economic, forex news)
- Market views (status, search, movers, fear/greed)
- Trade stream (WebSocket)

Upstream failures on pass-through routes map to 502. The daily briefing
degrades per source instead of failing.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from loguru import logger

from constants.market_symbols import (
    COMMODITY_ETFS,
    FUTURES_ETF_PROXIES,
    GLOBAL_INDEX_ETFS,
    INDEX_SYMBOLS,
    MOVER_SYMBOLS,
    SECTOR_ETFS,
)
from crawlers import (
    CalendarCrawler,
    CrawlResult,
    EarningsCrawler,
    FinnhubClient,
    FinnhubError,
    NewsCrawler,
    QuoteCrawler,
)
from crawlers.calendar_crawler import categorize_event
from crawlers.quote_crawler import has_price, normalize_quote
from processor.briefing import (
    SnapshotAssembler,
    SnapshotValidationError,
    compute_briefing,
    market_today,
    snapshot_from_payload,
)
from processor.market_summary import fear_greed, rank_movers

router = APIRouter()
ws_router = APIRouter()

ECONOMIC_CALENDAR_LIMIT = 50
EARNINGS_DEFAULT_DAYS = 90


# ============================================================
# Dependencies
# ============================================================
async def get_finnhub_client():
    """One Finnhub client (and connection pool) per request."""
    async with FinnhubClient() as client:
        yield client


def get_snapshot_assembler(client: FinnhubClient = Depends(get_finnhub_client)) -> SnapshotAssembler:
    return SnapshotAssembler(client)


def _upstream_failure(what: str, error: Optional[str] = None) -> HTTPException:
    logger.error(f"Failed to fetch {what}: {error}")
    return HTTPException(status_code=502, detail=f"Failed to fetch {what}")


def _require_success(result: CrawlResult, what: str) -> list[dict]:
    if not result.success:
        raise _upstream_failure(what, result.error)
    return result.data


async def _batch_quotes(client: FinnhubClient, entries: list[dict], what: str) -> list[dict]:
    """Quote each entry's symbol and merge the entry's metadata into the result."""
    result = await QuoteCrawler(client, [e["symbol"] for e in entries], name=what.replace(" ", "_")).run()
    _require_success(result, what)
    quotes = {q["symbol"]: q for q in result.data}

    merged = []
    for entry in entries:
        quote = quotes.get(entry["symbol"].upper(), {"error": True})
        if quote.get("error"):
            merged.append({**entry, "error": True})
        else:
            merged.append({
                **entry,
                "price": quote["price"],
                "change": quote["change"],
                "changePercent": quote["changePercent"],
                "high": quote["high"],
                "low": quote["low"],
            })
    return merged


# ============================================================
# Health Check
# ============================================================
@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ============================================================
# Daily Briefing
# ============================================================
@router.get("/daily-briefing")
async def get_daily_briefing(assembler: SnapshotAssembler = Depends(get_snapshot_assembler)):
    """
    Composite market sentiment briefing.

    Fetches all inputs in parallel, defaults whatever failed, then scores.
    """
    try:
        assembled = await assembler.assemble()
        result = compute_briefing(assembled.snapshot)
    except Exception:
        logger.exception("Daily briefing error")
        raise HTTPException(status_code=500, detail="Failed to generate daily briefing")

    logger.info(
        f"Daily briefing: score={result.score} signal={result.signal.value} "
        f"factors={len(result.factors)} failed_sources={assembled.failed_sources}"
    )
    return {
        **result.to_dict(),
        "data": assembled.data,
    }


@router.post("/daily-briefing/score")
async def score_snapshot(payload: Any = Body(...)):
    """Score a client-supplied snapshot (camelCase JSON, same fields as `data`)."""
    try:
        snapshot = snapshot_from_payload(payload)
    except SnapshotValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return compute_briefing(snapshot).to_dict()


# ============================================================
# Quotes
# ============================================================
@router.get("/quote/{symbol}")
async def get_quote(symbol: str, client: FinnhubClient = Depends(get_finnhub_client)):
    """Single stock quote."""
    try:
        raw = await client.quote(symbol)
    except FinnhubError as e:
        raise _upstream_failure("quote", str(e))
    return normalize_quote(symbol, raw)


@router.get("/profile/{symbol}")
async def get_profile(symbol: str, client: FinnhubClient = Depends(get_finnhub_client)):
    """Company profile (passed through unchanged)."""
    try:
        return await client.profile(symbol)
    except FinnhubError as e:
        raise _upstream_failure("profile", str(e))


@router.get("/futures/{symbol}")
async def get_futures_quote(symbol: str, client: FinnhubClient = Depends(get_finnhub_client)):
    """
    Futures quote.

    Tries the symbol as given, without the `=F` suffix and with a CME
    prefix; mini futures then fall back to their ETF proxy.
    """
    sym = symbol.upper()
    bare = sym.replace("=F", "")

    for candidate in (sym, bare, f"CME:{bare}"):
        try:
            quote = normalize_quote(sym, await client.quote(candidate))
        except FinnhubError as e:
            logger.debug(f"Futures variant {candidate} failed: {e}")
            continue
        if has_price(quote):
            return {**quote, "resolvedSymbol": candidate}

    proxy = FUTURES_ETF_PROXIES.get(sym)
    if proxy:
        try:
            quote = normalize_quote(sym, await client.quote(proxy))
        except FinnhubError as e:
            raise _upstream_failure("futures quote", str(e))
        return {
            **quote,
            "proxy": proxy,
            "note": f"Using {proxy} ETF as proxy (free tier limitation)",
        }

    return {"symbol": sym, "error": "No data available"}


@router.get("/indices")
async def get_indices(client: FinnhubClient = Depends(get_finnhub_client)):
    """Index futures and index ETFs."""
    return await _batch_quotes(client, INDEX_SYMBOLS, "indices")


@router.get("/sectors")
async def get_sectors(client: FinnhubClient = Depends(get_finnhub_client)):
    """Sector ETF performance."""
    return await _batch_quotes(client, SECTOR_ETFS, "sectors")


@router.get("/global-indices")
async def get_global_indices(client: FinnhubClient = Depends(get_finnhub_client)):
    """Foreign markets via ETF proxies."""
    return await _batch_quotes(client, GLOBAL_INDEX_ETFS, "global indices")


@router.get("/commodities")
async def get_commodities(client: FinnhubClient = Depends(get_finnhub_client)):
    """Commodities via ETF proxies."""
    return await _batch_quotes(client, COMMODITY_ETFS, "commodities")


# ============================================================
# News
# ============================================================
@router.get("/news/market")
async def get_market_news(client: FinnhubClient = Depends(get_finnhub_client)):
    """Latest general market news (20 articles)."""
    result = await NewsCrawler(client, limit=20).run()
    return _require_success(result, "market news")


@router.get("/news/{symbol}")
async def get_company_news(symbol: str, client: FinnhubClient = Depends(get_finnhub_client)):
    """Company news from the last 7 days (10 articles)."""
    result = await NewsCrawler(client, symbol=symbol, limit=10, today=market_today()).run()
    return _require_success(result, "company news")


# ============================================================
# Calendars
# ============================================================
@router.get("/earnings")
async def get_earnings(
    start: Optional[date] = Query(default=None, alias="from"),
    end: Optional[date] = Query(default=None, alias="to"),
    client: FinnhubClient = Depends(get_finnhub_client),
):
    """Mega-cap earnings calendar (defaults to the next 90 days)."""
    today = market_today()
    start = start or today
    end = end or today + timedelta(days=EARNINGS_DEFAULT_DAYS)

    result = await EarningsCrawler(client, start, end).run()
    return _require_success(result, "earnings calendar")


@router.get("/economic-calendar")
async def get_economic_calendar(client: FinnhubClient = Depends(get_finnhub_client)):
    """US economic releases, sorted by date."""
    result = await CalendarCrawler(client, country="US").run()
    return _require_success(result, "economic calendar")[:ECONOMIC_CALENDAR_LIMIT]


@router.get("/forex-news")
async def get_forex_news(client: FinnhubClient = Depends(get_finnhub_client)):
    """US high-impact releases, tagged with a category."""
    result = await CalendarCrawler(client, country="US").run()
    events = _require_success(result, "forex news")
    return [
        {
            "date": e["date"],
            "event": e["event"],
            "country": e["country"],
            "impact": e["impact"],
            "actual": e["actual"],
            "forecast": e["estimate"],
            "previous": e["previous"],
            "unit": e["unit"],
            "category": categorize_event(e["event"]),
        }
        for e in events
        if e["impact"] == "high"
    ]


# ============================================================
# Market views
# ============================================================
@router.get("/market-status")
async def get_market_status(client: FinnhubClient = Depends(get_finnhub_client)):
    """US market open/closed."""
    try:
        data = await client.market_status("US")
    except FinnhubError as e:
        raise _upstream_failure("market status", str(e))
    return {"status": "open" if data.get("isOpen") else "closed", **data}


@router.get("/search")
async def search_symbols(
    q: str = Query(..., min_length=1),
    client: FinnhubClient = Depends(get_finnhub_client),
):
    """Symbol lookup (top 10 matches)."""
    try:
        data = await client.search(q)
    except FinnhubError as e:
        raise _upstream_failure("symbol search", str(e))
    return (data.get("result") or [])[:10]


@router.get("/market-movers")
async def get_market_movers(client: FinnhubClient = Depends(get_finnhub_client)):
    """Top 5 gainers and losers from a fixed large-cap watchlist."""
    result = await QuoteCrawler(client, MOVER_SYMBOLS, name="movers").run()
    return rank_movers(_require_success(result, "market movers"))


@router.get("/fear-greed")
async def get_fear_greed(client: FinnhubClient = Depends(get_finnhub_client)):
    """VIX-based fear/greed gauge."""
    result = await QuoteCrawler(client, ["VIX", "SPY"], name="fear_greed").run()
    quotes = QuoteCrawler.by_symbol(result)
    if "VIX" not in quotes:
        raise _upstream_failure("fear/greed index", result.error)
    return fear_greed(quotes.get("VIX"), quotes.get("SPY"))


# ============================================================
# Trade stream
# ============================================================
@ws_router.websocket("/ws")
async def trade_stream(websocket: WebSocket):
    """Relay real-time trades for the symbols clients subscribe to."""
    relay = websocket.app.state.trade_relay
    await relay.register(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await relay.handle_client_message(raw)
    except WebSocketDisconnect:
        pass
    finally:
        await relay.unregister(websocket)
