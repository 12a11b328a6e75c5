from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from stock_dashboard.api.routes import page_router, router
from stock_dashboard.config.settings import Settings, get_settings
from stock_dashboard.integrations.alpha_vantage import AlphaVantageClient
from stock_dashboard.integrations.finnhub import FinnhubClient
from stock_dashboard.services.dashboard import DashboardController
from stock_dashboard.services.local_storage import JsonFileStorage
from stock_dashboard.services.quote_cache import QuoteCache
from stock_dashboard.services.quote_fetcher import QuoteFetcher


def build_dashboard(settings: Settings) -> DashboardController:
    fetcher = QuoteFetcher(
        primary_client=AlphaVantageClient(
            api_key=settings.ALPHAVANTAGE_API_KEY,
            base_url=settings.ALPHAVANTAGE_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SEC,
        ),
        secondary_client=FinnhubClient(
            api_key=settings.FINNHUB_API_KEY,
            base_url=settings.FINNHUB_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SEC,
        ),
        symbols=settings.DASHBOARD_SYMBOLS,
        max_workers=settings.QUOTE_MAX_WORKERS,
    )
    storage = JsonFileStorage(settings.CACHE_PATH) if settings.CACHE_PATH else None
    cache = QuoteCache(storage=storage, freshness_ms=settings.CACHE_FRESHNESS_MS)
    return DashboardController(fetcher=fetcher, cache=cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "dashboard", None) is None:
        app.state.dashboard = build_dashboard(app.state.get_settings())
        print("[DASHBOARD][startup] dashboard built from settings", flush=True)

    try:
        yield
    finally:
        dashboard = getattr(app.state, "dashboard", None)
        if dashboard is not None:
            dashboard.fetcher.close()
        print("[DASHBOARD][shutdown]", flush=True)


app = FastAPI(title="Stock Dashboard", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")
app.include_router(page_router)

# NOTE: built lazily in lifespan so app import does not require env during tests.
app.state.get_settings = get_settings
app.state.dashboard = None
