from __future__ import annotations

from typing import Any, Optional

import requests

from stock_dashboard.errors import EmptyQuoteError
from stock_dashboard.integrations.base import build_quote, get_json, to_finite_float
from stock_dashboard.schemas.quote import Quote


class AlphaVantageClient:
    """Primary quote source: Alpha Vantage GLOBAL_QUOTE endpoint."""

    provider_name = "Alpha Vantage"

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: str = "https://www.alphavantage.co",
        timeout: float = 5.0,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get_quote(self, symbol: str) -> Quote:
        payload = get_json(
            self.session,
            f"{self.base_url}/query",
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self.api_key},
            timeout=self.timeout,
            provider="alpha_vantage",
            symbol=symbol,
        )
        if not isinstance(payload, dict):
            raise EmptyQuoteError(f"unexpected payload type for {symbol}")

        quote = payload.get("Global Quote")
        if not quote:
            # throttled or unknown-symbol responses carry a Note/Information text instead
            raise EmptyQuoteError(
                str(payload.get("Note") or payload.get("Information") or f"no Global Quote for {symbol}")
            )

        price = to_finite_float(quote.get("05. price"), field_name="05. price")
        previous_close = to_finite_float(quote.get("08. previous close"), field_name="08. previous close")
        return build_quote(symbol, price, previous_close)

    def close(self) -> None:
        close = getattr(self.session, "close", None)
        if callable(close):
            close()
