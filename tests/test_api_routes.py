import unittest

from fastapi.testclient import TestClient

from stock_dashboard.errors import EmptyQuoteError
from stock_dashboard.main import app
from stock_dashboard.schemas.dashboard import DashboardState
from stock_dashboard.schemas.quote import Quote
from stock_dashboard.services.dashboard import DashboardController
from stock_dashboard.services.quote_cache import QuoteCache
from stock_dashboard.services.quote_fetcher import QuoteFetcher


class StubQuoteClient:
    def __init__(self, provider_name: str, prices: dict[str, float]) -> None:
        self.provider_name = provider_name
        self.prices = prices
        self.calls = 0

    def get_quote(self, symbol: str) -> Quote:
        self.calls += 1
        if symbol not in self.prices:
            raise EmptyQuoteError(symbol)
        return Quote(symbol=symbol, price=self.prices[symbol], change_pct=1.5)


class StockRoutesTest(unittest.TestCase):
    def setUp(self):
        self.primary = StubQuoteClient("Alpha Vantage", {"AAPL": 190.0, "MSFT": 410.0})
        self.secondary = StubQuoteClient("Finnhub", {})
        self.original_dashboard = app.state.dashboard
        app.state.dashboard = DashboardController(
            fetcher=QuoteFetcher(
                primary_client=self.primary,
                secondary_client=self.secondary,
                symbols=["AAPL", "MSFT"],
            ),
            cache=QuoteCache(),
        )
        self.client = TestClient(app)

    def tearDown(self):
        app.state.dashboard = self.original_dashboard

    def test_root_redirects_to_stocks_page(self):
        r = self.client.get("/", follow_redirects=False)

        self.assertEqual(r.status_code, 307)
        self.assertEqual(r.headers["location"], "/stocks")

    def test_view_model_mount_fetches_then_serves_cache(self):
        r1 = self.client.get("/v1/stocks")
        r2 = self.client.get("/v1/stocks")

        self.assertEqual(r1.status_code, 200)
        body = r1.json()
        self.assertEqual(body["status"], "DISPLAYING")
        self.assertEqual(body["source"], "primary")
        self.assertEqual(body["provider_label"], "Alpha Vantage")
        self.assertEqual(
            body["quotes"],
            [
                {"symbol": "AAPL", "price": 190.0, "change_pct": 1.5},
                {"symbol": "MSFT", "price": 410.0, "change_pct": 1.5},
            ],
        )
        self.assertTrue(r2.json()["from_cache"])
        self.assertEqual(self.primary.calls, 2)

    def test_refresh_refetches(self):
        self.client.get("/v1/stocks")

        r = self.client.post("/v1/stocks/refresh")

        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.json()["from_cache"])
        self.assertEqual(self.primary.calls, 4)

    def test_refresh_rejected_while_loading(self):
        app.state.dashboard._state = DashboardState(status="LOADING", refresh_enabled=False)

        r = self.client.post("/v1/stocks/refresh")

        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json(), {"detail": "REFRESH_IN_PROGRESS"})
        self.assertEqual(self.primary.calls, 0)

    def test_sample_data_when_providers_are_empty(self):
        self.primary.prices = {}

        body = self.client.get("/v1/stocks").json()

        self.assertEqual(body["source"], "sample")
        self.assertTrue(body["using_sample_data"])
        self.assertEqual([q["symbol"] for q in body["quotes"]], ["AAPL", "MSFT", "GOOGL", "TSLA"])
        self.assertEqual(self.secondary.calls, 2)

    def test_html_page_renders_quotes(self):
        r = self.client.get("/stocks")

        self.assertEqual(r.status_code, 200)
        self.assertIn("text/html", r.headers["content-type"])
        self.assertIn("Stock Market Overview", r.text)
        self.assertIn("$410.00", r.text)
        self.assertIn('action="/stocks/refresh"', r.text)

    def test_html_page_while_loading_shows_skeleton(self):
        app.state.dashboard._state = DashboardState(status="LOADING", refresh_enabled=False)

        r = self.client.get("/stocks")

        self.assertIn("skeleton-row", r.text)
        self.assertEqual(self.primary.calls, 0)

    def test_html_refresh_redirects_back_to_page(self):
        r = self.client.post("/stocks/refresh", follow_redirects=False)

        self.assertEqual(r.status_code, 303)
        self.assertEqual(r.headers["location"], "/stocks")
        self.assertEqual(self.primary.calls, 2)

    def test_quote_metrics(self):
        self.client.get("/v1/stocks")

        r = self.client.get("/v1/metrics/quote")

        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["primary_attempts"], 1)
        self.assertEqual(body["secondary_attempts"], 0)
        self.assertEqual(body["batch_final_count"], 2)
        self.assertEqual(body["last_source"], "primary")
        self.assertTrue(body["cache_present"])
        self.assertTrue(body["cache_fresh"])
        self.assertGreaterEqual(body["cache_age_ms"], 0)
        self.assertEqual(body["dashboard_status"], "DISPLAYING")

    def test_html_page_renders_table_cards_and_sample_warning(self):
        self.primary.prices = {}

        r = self.client.get("/stocks")

        self.assertEqual(r.status_code, 200)
        self.assertIn("<th>Symbol</th>", r.text)
        self.assertIn('class="cards"', r.text)
        self.assertIn("Real-time data is currently unavailable. Showing sample data.", r.text)
        self.assertEqual(r.text.count("$320.00"), 2)
        self.assertIn('<span class="badge negative">-0.80%</span>', r.text)
        self.assertIn('<button type="submit">Refresh Data</button>', r.text)

    def test_html_page_while_loading_shows_only_skeleton(self):
        app.state.dashboard._state = DashboardState(status="LOADING", refresh_enabled=False)

        r = self.client.get("/stocks")

        self.assertEqual(r.text.count('class="skeleton-row"'), 4)
        self.assertNotIn("<button", r.text)
        self.assertNotIn('action="/stocks/refresh"', r.text)
        self.assertNotIn("<table>", r.text)

    def test_html_refresh_while_loading_does_not_fetch(self):
        app.state.dashboard._state = DashboardState(status="LOADING", refresh_enabled=False)

        r = self.client.post("/stocks/refresh", follow_redirects=False)

        self.assertEqual(r.status_code, 303)
        self.assertEqual(self.primary.calls, 0)


if __name__ == "__main__":
    unittest.main()
