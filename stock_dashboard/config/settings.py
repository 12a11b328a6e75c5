import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_SYMBOLS = ["AAPL", "MSFT", "GOOGL", "TSLA"]


class Settings(BaseModel):
    ALPHAVANTAGE_API_KEY: str = ""
    FINNHUB_API_KEY: str = ""
    ALPHAVANTAGE_BASE_URL: str = "https://www.alphavantage.co"
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    DASHBOARD_SYMBOLS: list[str]
    CACHE_FRESHNESS_MS: int = Field(default=120_000, gt=0)
    CACHE_PATH: str | None = None
    HTTP_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    QUOTE_MAX_WORKERS: int = Field(default=8, ge=1)

    @classmethod
    def from_env(cls) -> "Settings":
        raw_symbols = os.getenv("DASHBOARD_SYMBOLS", ",".join(DEFAULT_SYMBOLS))
        symbols = [s.strip().upper() for s in raw_symbols.split(",") if s.strip()]
        if not symbols:
            symbols = list(DEFAULT_SYMBOLS)

        raw = {
            "ALPHAVANTAGE_API_KEY": os.getenv("ALPHAVANTAGE_API_KEY", ""),
            "FINNHUB_API_KEY": os.getenv("FINNHUB_API_KEY", ""),
            "DASHBOARD_SYMBOLS": symbols,
            "CACHE_PATH": os.getenv("CACHE_PATH") or None,
        }
        # unset numeric/url knobs keep the model defaults
        for key in (
            "ALPHAVANTAGE_BASE_URL",
            "FINNHUB_BASE_URL",
            "CACHE_FRESHNESS_MS",
            "HTTP_TIMEOUT_SEC",
            "QUOTE_MAX_WORKERS",
        ):
            value = os.getenv(key)
            if value:
                raw[key] = value

        return cls.model_validate(raw)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
