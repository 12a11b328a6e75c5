from __future__ import annotations

import math
from typing import Any

from stock_dashboard.errors import EmptyQuoteError, QuoteTransportError
from stock_dashboard.schemas.quote import Quote


def to_finite_float(value: Any, *, field_name: str) -> float:
    try:
        if value is None or value == "":
            raise EmptyQuoteError(f"missing value for {field_name}")
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise EmptyQuoteError(f"invalid numeric value for {field_name}: {value!r}") from exc
    if not math.isfinite(number):
        raise EmptyQuoteError(f"non-finite value for {field_name}: {value!r}")
    return number


def build_quote(symbol: str, price: float, previous_close: float) -> Quote:
    if price < 0:
        raise EmptyQuoteError(f"negative price for {symbol}: {price}")
    if previous_close <= 0:
        raise EmptyQuoteError(f"non-positive previous close for {symbol}: {previous_close}")
    change_pct = round((price - previous_close) / previous_close * 100, 2)
    return Quote(symbol=symbol, price=price, change_pct=change_pct)


def status_code_from_error(exc: Exception) -> int | None:
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    if isinstance(code, int):
        return code
    return None


def get_json(session: Any, url: str, *, params: dict, timeout: float, provider: str, symbol: str) -> Any:
    """GET ``url`` and decode JSON, mapping every failure onto the quote error taxonomy."""
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except ValueError as exc:
        # covers JSONDecodeError from both stdlib json and requests
        raise QuoteTransportError(
            f"{provider} returned undecodable payload for {symbol}",
            provider=provider,
            symbol=symbol,
        ) from exc
    except Exception as exc:
        if status_code_from_error(exc) == 429:
            raise EmptyQuoteError(f"{provider} rate limited {symbol}") from exc
        raise QuoteTransportError(
            f"{provider} request failed for {symbol}: {exc}",
            provider=provider,
            symbol=symbol,
        ) from exc
