"""Tests for the Finnhub client and the crawlers built on it."""
import asyncio
from datetime import date

import httpx
import pytest

from crawlers import (
    BaseCrawler,
    CalendarCrawler,
    EarningsCrawler,
    FinnhubClient,
    FinnhubError,
    NewsCrawler,
    QuoteCrawler,
)
from crawlers.calendar_crawler import categorize_event, normalize_event
from crawlers.quote_crawler import has_price, normalize_quote


def run_with(finnhub_factory, handler, make_coro):
    """Run `make_coro(client)` against a client whose transport is `handler`."""
    async def _run():
        client, http = finnhub_factory(handler)
        async with http:
            return await make_coro(client)
    return asyncio.run(_run())


def json_handler(payload, status_code=200, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return handler


# ============================================================
# FinnhubClient
# ============================================================
class TestFinnhubClient:
    def test_token_and_params_are_attached(self, finnhub_factory):
        seen = []
        data = run_with(finnhub_factory, json_handler({"c": 1.0}, seen=seen), lambda c: c.quote("aapl"))

        assert data == {"c": 1.0}
        assert seen[0].url.path == "/api/v1/quote"
        assert seen[0].url.params["symbol"] == "AAPL"
        assert seen[0].url.params["token"] == "test-token"

    def test_error_body_raises(self, finnhub_factory):
        with pytest.raises(FinnhubError, match="API limit reached"):
            run_with(
                finnhub_factory,
                json_handler({"error": "API limit reached"}),
                lambda c: c.quote("AAPL"),
            )

    def test_http_status_raises_with_code(self, finnhub_factory):
        with pytest.raises(FinnhubError) as exc_info:
            run_with(finnhub_factory, json_handler({}, status_code=429), lambda c: c.quote("AAPL"))
        assert exc_info.value.status_code == 429

    def test_invalid_json_raises(self, finnhub_factory):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(FinnhubError, match="Invalid JSON"):
            run_with(finnhub_factory, handler, lambda c: c.economic_calendar())

    def test_transport_error_raises(self, finnhub_factory):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FinnhubError):
            run_with(finnhub_factory, handler, lambda c: c.market_status())

    def test_requires_context_manager(self):
        client = FinnhubClient(api_key="test-token")
        with pytest.raises(RuntimeError):
            asyncio.run(client.quote("AAPL"))


# ============================================================
# Quotes
# ============================================================
class TestQuoteCrawler:
    def test_normalize_quote(self):
        quote = normalize_quote("spy", {"c": 510.2, "d": 1.1, "dp": 0.22, "h": 511, "l": 505, "o": 506, "pc": 509.1, "t": 1})
        assert quote["symbol"] == "SPY"
        assert quote["price"] == 510.2
        assert quote["changePercent"] == 0.22
        assert quote["previousClose"] == 509.1
        assert has_price(quote)
        assert not has_price(normalize_quote("XYZ", {"c": 0}))
        assert not has_price({"symbol": "XYZ", "error": True})

    def test_partial_failure_still_succeeds(self, finnhub_factory):
        def handler(request):
            if request.url.params["symbol"] == "BAD":
                return httpx.Response(500)
            return httpx.Response(200, json={"c": 10.0, "dp": 1.0})

        result = run_with(finnhub_factory, handler, lambda c: QuoteCrawler(c, ["spy", "bad"]).run())

        assert result.success
        assert result.data[1] == {"symbol": "BAD", "error": True}
        assert "BAD" in result.error
        assert list(QuoteCrawler.by_symbol(result)) == ["SPY"]

    def test_non_object_body_fails_only_that_symbol(self, finnhub_factory):
        bodies = {"SPY": {"c": 510.0, "dp": 0.4}, "NULL": None, "LIST": [1, 2]}

        def handler(request):
            return httpx.Response(200, json=bodies[request.url.params["symbol"]])

        result = run_with(finnhub_factory, handler, lambda c: QuoteCrawler(c, ["SPY", "NULL", "LIST"]).run())

        assert result.success
        assert result.data[1:] == [{"symbol": "NULL", "error": True}, {"symbol": "LIST", "error": True}]
        assert QuoteCrawler.by_symbol(result)["SPY"]["price"] == 510.0

    def test_total_failure(self, finnhub_factory):
        result = run_with(
            finnhub_factory,
            json_handler({}, status_code=502),
            lambda c: QuoteCrawler(c, ["SPY", "QQQ"]).run(),
        )
        assert not result.success
        assert QuoteCrawler.by_symbol(result) == {}


class TestBaseCrawlerRun:
    def test_unexpected_exception_becomes_failed_result(self):
        class ExplodingCrawler(BaseCrawler):
            async def fetch(self):
                raise KeyError("boom")

        result = asyncio.run(ExplodingCrawler("exploding", client=None).run(save_raw=False))

        assert not result.success
        assert result.source == "exploding"
        assert result.data == []
        assert "boom" in result.error

    def test_save_raw_writes_json(self, tmp_path, finnhub_factory):
        result = run_with(
            finnhub_factory,
            json_handler({"c": 5.0}),
            lambda c: QuoteCrawler(c, ["SPY"]).fetch(),
        )
        crawler = QuoteCrawler(client=None, symbols=["SPY"])
        crawler.raw_dir = tmp_path

        path = crawler.save_raw(result)
        assert path.exists()
        assert path.name.startswith("quotes_")


# ============================================================
# News
# ============================================================
class TestNewsCrawler:
    ARTICLES = [
        {"headline": f"Headline {i}", "summary": "", "source": "Reuters",
         "url": f"https://example.com/{i}", "image": "", "datetime": 1792400000 + i}
        for i in range(30)
    ]

    def test_market_news_limit_and_shape(self, finnhub_factory):
        seen = []
        result = run_with(
            finnhub_factory,
            json_handler(self.ARTICLES, seen=seen),
            lambda c: NewsCrawler(c, limit=20).run(),
        )

        assert seen[0].url.params["category"] == "general"
        assert result.source == "news"
        assert len(result.data) == 20
        first = result.data[0]
        assert set(first) == {"headline", "source", "url", "thumbnail", "timestamp", "summary"}
        assert first["thumbnail"] is None
        assert first["timestamp"].endswith("+00:00")

    def test_company_news_window(self, finnhub_factory):
        seen = []
        result = run_with(
            finnhub_factory,
            json_handler(self.ARTICLES[:3], seen=seen),
            lambda c: NewsCrawler(c, symbol="nvda", limit=10, today=date(2026, 10, 19)).run(),
        )

        assert seen[0].url.path == "/api/v1/company-news"
        assert seen[0].url.params["symbol"] == "NVDA"
        assert seen[0].url.params["from"] == "2026-10-12"
        assert seen[0].url.params["to"] == "2026-10-19"
        assert result.source == "news_nvda"
        assert len(result.data) == 3

    def test_non_list_payload_fails(self, finnhub_factory):
        result = run_with(finnhub_factory, json_handler({"unexpected": True}), lambda c: NewsCrawler(c).run())
        assert not result.success
        assert result.data == []


# ============================================================
# Calendars
# ============================================================
class TestCalendarCrawler:
    def test_bare_list_shape(self, finnhub_factory):
        payload = [
            {"date": "2026-10-21", "event": "Retail Sales", "country": "US", "impact": "High",
             "actual": None, "estimate": 0.3, "previous": 0.1, "unit": "%"},
            {"date": "2026-10-19", "event": "CPI", "country": "US", "impact": "high"},
            {"date": "2026-10-19", "event": "ECB Rate Decision", "country": "EU", "impact": "high"},
        ]
        result = run_with(finnhub_factory, json_handler(payload), lambda c: CalendarCrawler(c).run())

        assert result.success
        assert [e["event"] for e in result.data] == ["CPI", "Retail Sales"]
        assert result.data[1]["impact"] == "high"
        assert result.data[1]["estimate"] == 0.3

    def test_wrapped_shape_with_time(self, finnhub_factory):
        payload = {"economicCalendar": [
            {"time": "2026-10-19 12:30:00", "event": "Initial Jobless Claims", "country": "US",
             "impact": "medium", "prev": 220},
        ]}
        result = run_with(finnhub_factory, json_handler(payload), lambda c: CalendarCrawler(c).run())

        assert result.data == [{
            "date": "2026-10-19",
            "event": "Initial Jobless Claims",
            "country": "US",
            "impact": "medium",
            "actual": None,
            "estimate": None,
            "previous": 220,
            "unit": "",
        }]

    def test_unexpected_shape_fails(self, finnhub_factory):
        result = run_with(finnhub_factory, json_handler({"economicCalendar": None}), lambda c: CalendarCrawler(c).run())
        assert not result.success

    def test_missing_impact_is_none(self):
        assert normalize_event({"date": "2026-10-19", "event": "Redbook"})["impact"] is None

    @pytest.mark.parametrize("name,category", [
        ("Non-Farm Payrolls", "Employment"),
        ("Core CPI MoM", "Inflation"),
        ("FOMC Interest Rate Decision", "Fed"),
        ("Initial Jobless Claims", "Employment"),
        ("GDP Growth Rate QoQ", "Growth"),
        ("Building Permits", "Housing"),
        ("Redbook Index", "Economic"),
    ])
    def test_categorize_event(self, name, category):
        assert categorize_event(name) == category


class TestEarningsCrawler:
    def test_filters_to_allow_list(self, finnhub_factory):
        seen = []
        payload = {"earningsCalendar": [
            {"symbol": "AAPL", "date": "2026-10-22", "hour": "amc", "epsEstimate": 1.6, "quarter": 4, "year": 2026},
            {"symbol": "TINY", "date": "2026-10-22", "hour": "bmo"},
            {"symbol": "MSFT", "date": "2026-10-23", "hour": "bmo", "epsEstimate": None},
        ]}
        result = run_with(
            finnhub_factory,
            json_handler(payload, seen=seen),
            lambda c: EarningsCrawler(c, date(2026, 10, 19), date(2026, 10, 26)).run(),
        )

        assert seen[0].url.params["from"] == "2026-10-19"
        assert seen[0].url.params["to"] == "2026-10-26"
        assert [e["symbol"] for e in result.data] == ["AAPL", "MSFT"]
        assert result.data[0]["epsEstimate"] == "1.6"
        assert result.data[1]["epsEstimate"] is None
        assert result.data[1]["time"] == "bmo"

    def test_empty_calendar_is_success(self, finnhub_factory):
        result = run_with(
            finnhub_factory,
            json_handler({"earningsCalendar": []}),
            lambda c: EarningsCrawler(c, date(2026, 10, 19), date(2026, 10, 26)).run(),
        )
        assert result.success
        assert result.data == []
