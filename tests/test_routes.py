"""Tests for the REST facade and the /ws trade stream."""
import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import get_finnhub_client, get_snapshot_assembler
from api.trade_relay import TradeRelay
from crawlers import FinnhubClient
from processor.briefing import AssembledSnapshot

client = TestClient(app)

FINNHUB_BASE = "https://finnhub.test/api/v1"


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def upstream():
    """Route every Finnhub call made by the app through `handler`."""
    def _install(handler):
        async def override():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                yield FinnhubClient(api_key="test-token", base_url=FINNHUB_BASE, http_client=http)
        app.dependency_overrides[get_finnhub_client] = override
    return _install


def quotes_handler(prices: dict, status_code: int = 200):
    """Answer /quote with {c, dp} from `prices` (symbol -> (price, changePercent))."""
    def handler(request):
        symbol = request.url.params.get("symbol")
        if status_code != 200:
            return httpx.Response(status_code)
        price, change_percent = prices.get(symbol, (0, 0))
        return httpx.Response(200, json={"c": price, "d": 0.5, "dp": change_percent, "h": price, "l": price})
    return handler


REGIONS = [
    {"name": name, "changePercent": 0.8}
    for name in ("London", "Tokyo", "Hong Kong", "Frankfurt")
]


# ============================================================
# Health
# ============================================================
class TestHealth:
    def test_root(self):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Market Pulse Dashboard"

    def test_health(self):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Daily briefing
# ============================================================
class FakeAssembler:
    def __init__(self, assembled=None, error=None):
        self.assembled = assembled
        self.error = error

    async def assemble(self, as_of_date=None):
        if self.error:
            raise self.error
        return self.assembled


class TestDailyBriefing:
    def test_briefing_payload(self, snapshot_factory):
        snapshot = snapshot_factory(vix=12, spy=2, qqq=2.5, regions=(0.8, 0.8, 0.8, 0.8))
        data = {"vix": {"price": 12.0, "change": -0.4, "changePercent": -3.2}}
        app.dependency_overrides[get_snapshot_assembler] = lambda: FakeAssembler(
            AssembledSnapshot(snapshot=snapshot, data=data)
        )

        response = client.get("/api/daily-briefing")

        assert response.status_code == 200
        body = response.json()
        assert body["score"] == 100
        assert body["signal"] == "Strong Bull"
        assert [f["points"] for f in body["factors"]] == [20, 18, 10, 3]
        assert body["briefing"].startswith("VIX at 12.0")
        assert body["data"] == data
        assert "timestamp" in body

    def test_unexpected_failure_is_500(self):
        app.dependency_overrides[get_snapshot_assembler] = lambda: FakeAssembler(error=RuntimeError("boom"))

        response = client.get("/api/daily-briefing")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate daily briefing"

    def test_score_posted_snapshot(self):
        response = client.post("/api/daily-briefing/score", json={
            "vix": {"price": 12},
            "spy": {"changePercent": 2},
            "qqq": {"changePercent": 2.5},
            "globalRegions": REGIONS,
            "asOfDate": "2026-10-19",
        })

        assert response.status_code == 200
        assert response.json()["score"] == 100
        assert response.json()["signal"] == "Strong Bull"

    def test_score_rejects_malformed_snapshot(self):
        response = client.post("/api/daily-briefing/score", json={"globalRegions": REGIONS[:3]})

        assert response.status_code == 422
        assert "exactly 4 regions" in response.json()["detail"]

    @pytest.mark.parametrize("spy_change,message", [
        ("NaN", "spy.changePercent must be a finite number"),
        ("Infinity", "spy.changePercent must be a finite number"),
        ("1" + "0" * 400, "spy.changePercent is out of range"),
    ])
    def test_score_rejects_unrepresentable_numbers(self, spy_change, message):
        regions = json.dumps(REGIONS)
        body = f'{{"spy": {{"changePercent": {spy_change}}}, "globalRegions": {regions}}}'

        response = client.post(
            "/api/daily-briefing/score",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert message in response.json()["detail"]


# ============================================================
# Pass-through routes
# ============================================================
class TestQuotes:
    def test_quote(self, upstream):
        upstream(quotes_handler({"AAPL": (201.5, 1.2)}))

        response = client.get("/api/quote/aapl")

        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "AAPL"
        assert body["price"] == 201.5
        assert body["changePercent"] == 1.2

    def test_quote_upstream_failure_is_502(self, upstream):
        upstream(quotes_handler({}, status_code=500))

        response = client.get("/api/quote/AAPL")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to fetch quote"

    def test_sectors_merge_metadata(self, upstream):
        upstream(quotes_handler({"XLK": (210.0, 1.1)}))

        response = client.get("/api/sectors")

        assert response.status_code == 200
        body = response.json()
        assert body[0]["symbol"] == "XLK"
        assert body[0]["name"] == "Technology"
        assert body[0]["price"] == 210.0

    def test_futures_fall_back_to_etf_proxy(self, upstream):
        upstream(quotes_handler({"SPY": (510.0, 0.4)}))

        response = client.get("/api/futures/MES=F")

        body = response.json()
        assert body["proxy"] == "SPY"
        assert body["price"] == 510.0
        assert body["symbol"] == "MES=F"

    def test_futures_without_proxy(self, upstream):
        upstream(quotes_handler({}))

        response = client.get("/api/futures/zz=f")

        assert response.json() == {"symbol": "ZZ=F", "error": "No data available"}

    def test_market_movers(self, upstream):
        upstream(quotes_handler({"NVDA": (900.0, 4.0), "INTC": (30.0, -3.0), "AAPL": (200.0, 1.0)}))

        response = client.get("/api/market-movers")

        body = response.json()
        assert body["gainers"][0]["symbol"] == "NVDA"
        assert body["losers"][0]["symbol"] == "INTC"

    def test_fear_greed(self, upstream):
        upstream(quotes_handler({"VIX": (15.0, -1.0), "SPY": (510.0, -0.3)}))

        body = client.get("/api/fear-greed").json()

        assert body["sentiment"] == "Greed"
        assert body["sentimentScore"] == 75
        assert body["spyDirection"] == "Bearish"

    def test_fear_greed_without_vix_is_502(self, upstream):
        upstream(quotes_handler({}, status_code=503))

        assert client.get("/api/fear-greed").status_code == 502


class TestCalendars:
    def test_economic_calendar_is_capped(self, upstream):
        events = [
            {"date": f"2026-10-{day:02d}", "event": "Redbook", "country": "US", "impact": "low"}
            for day in range(1, 31)
        ] * 2
        upstream(lambda request: httpx.Response(200, json=events))

        body = client.get("/api/economic-calendar").json()

        assert len(body) == 50
        assert body[0]["date"] == "2026-10-01"

    def test_forex_news_keeps_high_impact_only(self, upstream):
        events = [
            {"date": "2026-10-19", "event": "CPI YoY", "country": "US", "impact": "high", "estimate": 2.9},
            {"date": "2026-10-19", "event": "Redbook", "country": "US", "impact": "low"},
        ]
        upstream(lambda request: httpx.Response(200, json=events))

        body = client.get("/api/forex-news").json()

        assert len(body) == 1
        assert body[0]["category"] == "Inflation"
        assert body[0]["forecast"] == 2.9

    def test_earnings_query_range(self, upstream):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"earningsCalendar": [{"symbol": "AAPL", "date": "2026-10-22"}]})

        upstream(handler)

        body = client.get("/api/earnings", params={"from": "2026-10-19", "to": "2026-10-23"}).json()

        assert seen[0].url.params["from"] == "2026-10-19"
        assert seen[0].url.params["to"] == "2026-10-23"
        assert body[0]["symbol"] == "AAPL"

    def test_calendar_failure_is_502(self, upstream):
        upstream(lambda request: httpx.Response(500))

        assert client.get("/api/economic-calendar").status_code == 502


class TestSearchAndStatus:
    def test_search_requires_query(self):
        assert client.get("/api/search").status_code == 422

    def test_search_returns_top_ten(self, upstream):
        results = [{"symbol": f"A{i}", "description": "x"} for i in range(15)]
        upstream(lambda request: httpx.Response(200, json={"count": 15, "result": results}))

        body = client.get("/api/search", params={"q": "a"}).json()

        assert len(body) == 10

    def test_market_status(self, upstream):
        upstream(lambda request: httpx.Response(200, json={"exchange": "US", "isOpen": True}))

        body = client.get("/api/market-status").json()

        assert body["status"] == "open"
        assert body["exchange"] == "US"


# ============================================================
# Trade stream
# ============================================================
class FakeUpstream:
    """Answers every upstream subscribe with one trade for that symbol."""

    def __init__(self):
        self.sent = []
        self.queue = asyncio.Queue()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def send(self, raw):
        message = json.loads(raw)
        self.sent.append(message)
        if message["type"] == "subscribe":
            await self.queue.put(json.dumps({
                "type": "trade",
                "data": [{"s": message["symbol"], "p": 101.5, "t": 1792400000000, "v": 10}],
            }))

    def __aiter__(self):
        return self

    async def __anext__(self):
        return await self.queue.get()


class TestTradeStream:
    def test_subscribe_relays_trades(self):
        fake = FakeUpstream()
        relay = TradeRelay(upstream_url="wss://upstream.test", reconnect_seconds=0, connect=lambda url: fake)
        original, app.state.trade_relay = app.state.trade_relay, relay
        try:
            with client.websocket_connect("/ws") as ws:
                ws.send_text("not json")
                ws.send_json({"type": "subscribe", "symbol": "aapl"})
                message = ws.receive_json()
        finally:
            app.state.trade_relay = original

        assert message["type"] == "trade"
        assert message["data"][0]["s"] == "AAPL"
        assert {"type": "subscribe", "symbol": "AAPL"} in fake.sent
