from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from stock_dashboard.errors import EmptyQuoteError, ProviderExhaustedError
from stock_dashboard.schemas.quote import FetchResult, ProviderSource, Quote


def normalize_symbols(symbols: list[str]) -> list[str]:
    unique_symbols: list[str] = []
    seen: set[str] = set()
    for symbol in symbols:
        value = str(symbol).strip().upper()
        if not value or value in seen:
            continue
        seen.add(value)
        unique_symbols.append(value)
    return unique_symbols


class QuoteFetcher:
    """Primary-then-secondary quote batch fetcher.

    Each provider attempt fans out one request per symbol and waits for all of
    them. Symbols without a usable quote are dropped; an attempt that yields no
    quotes at all hands over to the next provider. A request that raises aborts
    the whole fetch.
    """

    def __init__(
        self,
        *,
        primary_client,
        secondary_client,
        symbols: list[str],
        max_workers: int = 8,
    ) -> None:
        self.primary_client = primary_client
        self.secondary_client = secondary_client
        self.symbols = normalize_symbols(symbols)
        self.max_workers = max_workers

        self.primary_attempts = 0
        self.secondary_attempts = 0
        self.fallback_triggered = 0
        self.transport_errors = 0
        self.exhausted = 0
        self.last_batch_target = 0
        self.last_batch_final = 0
        self.last_source: ProviderSource | None = None

    def _fetch_one(self, client, symbol: str) -> Quote | None:
        try:
            return client.get_quote(symbol)
        except EmptyQuoteError as exc:
            print(
                f"[QUOTE][empty_quote] provider={client.provider_name} symbol={symbol} reason={exc}",
                flush=True,
            )
            return None

    def _fetch_all(self, client, symbols: list[str]) -> list[Quote]:
        if not symbols:
            return []
        workers = min(self.max_workers, len(symbols))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quote-fetch") as pool:
            # map keeps request order and re-raises the first failure
            rows = list(pool.map(lambda s: self._fetch_one(client, s), symbols))
        return [row for row in rows if row is not None]

    def _resolve(self, symbols: list[str]) -> tuple[list[Quote], ProviderSource, str]:
        self.primary_attempts += 1
        quotes = self._fetch_all(self.primary_client, symbols)
        if quotes:
            return quotes, "primary", self.primary_client.provider_name

        self.fallback_triggered += 1
        self.secondary_attempts += 1
        quotes = self._fetch_all(self.secondary_client, symbols)
        if quotes:
            return quotes, "secondary", self.secondary_client.provider_name

        raise ProviderExhaustedError("PROVIDER_EXHAUSTED")

    def fetch(self, symbols: list[str] | None = None) -> FetchResult:
        target = self.symbols if symbols is None else normalize_symbols(symbols)
        self.last_batch_target = len(target)

        try:
            quotes, source, provider_name = self._resolve(target)
            result = FetchResult(quotes=quotes, source=source, provider_name=provider_name, ok=True)
        except ProviderExhaustedError:
            self.exhausted += 1
            result = FetchResult(ok=False, error="PROVIDER_EXHAUSTED")
        except Exception as exc:
            self.transport_errors += 1
            print(f"[QUOTE][transport_error] error={exc}", flush=True)
            result = FetchResult(ok=False, error="TRANSPORT_ERROR")

        self.last_batch_final = len(result.quotes)
        self.last_source = result.source
        print(
            "[QUOTE][batch_resolve] "
            f"target_count={len(target)} final_count={len(result.quotes)} "
            f"source={result.source} ok={int(result.ok)} error={result.error}",
            flush=True,
        )
        return result

    def metrics(self) -> dict[str, int | str | None]:
        return {
            "primary_attempts": self.primary_attempts,
            "secondary_attempts": self.secondary_attempts,
            "fallback_triggered": self.fallback_triggered,
            "transport_errors": self.transport_errors,
            "exhausted": self.exhausted,
            "batch_target_count": self.last_batch_target,
            "batch_final_count": self.last_batch_final,
            "last_source": self.last_source,
        }

    def close(self) -> None:
        for client in (self.primary_client, self.secondary_client):
            close = getattr(client, "close", None)
            if callable(close):
                close()
