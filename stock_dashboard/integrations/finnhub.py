from __future__ import annotations

from typing import Any, Optional

import requests

from stock_dashboard.errors import EmptyQuoteError
from stock_dashboard.integrations.base import build_quote, get_json, to_finite_float
from stock_dashboard.schemas.quote import Quote


class FinnhubClient:
    """Secondary quote source: Finnhub /quote endpoint."""

    provider_name = "Finnhub"

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: str = "https://finnhub.io/api/v1",
        timeout: float = 5.0,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get_quote(self, symbol: str) -> Quote:
        payload = get_json(
            self.session,
            f"{self.base_url}/quote",
            params={"symbol": symbol, "token": self.api_key},
            timeout=self.timeout,
            provider="finnhub",
            symbol=symbol,
        )
        # unknown symbols come back as all-zero quotes
        if not isinstance(payload, dict) or not payload.get("c"):
            raise EmptyQuoteError(f"no current price for {symbol}")

        price = to_finite_float(payload.get("c"), field_name="c")
        previous_close = to_finite_float(payload.get("pc"), field_name="pc")
        return build_quote(symbol, price, previous_close)

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if callable(close):
            close()
