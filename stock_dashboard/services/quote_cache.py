from __future__ import annotations

import json
import time
from collections.abc import MutableMapping

from pydantic import ValidationError

from stock_dashboard.schemas.quote import CacheEntry, ProviderSource, Quote

STOCKS_KEY = "stocks"
STOCKS_TIME_KEY = "stocks_time"
STOCKS_SOURCE_KEY = "stocks_source"

DEFAULT_FRESHNESS_MS = 120_000


def now_ms() -> int:
    return int(time.time() * 1000)


class QuoteCache:
    """Last successful batch plus fetch time, kept in a string key/value store."""

    def __init__(
        self,
        storage: MutableMapping[str, str] | None = None,
        freshness_ms: int = DEFAULT_FRESHNESS_MS,
    ) -> None:
        self.storage: MutableMapping[str, str] = {} if storage is None else storage
        self.freshness_ms = freshness_ms

    def read(self) -> CacheEntry | None:
        raw_batch = self.storage.get(STOCKS_KEY)
        raw_time = self.storage.get(STOCKS_TIME_KEY)
        if raw_batch is None or raw_time is None:
            return None
        try:
            batch = [Quote.model_validate(row) for row in json.loads(raw_batch)]
            return CacheEntry(
                batch=batch,
                fetched_at_ms=int(raw_time),
                source=self.storage.get(STOCKS_SOURCE_KEY) or None,
            )
        except (TypeError, ValueError, ValidationError) as exc:
            print(f"[CACHE][read_error] error={exc}", flush=True)
            return None

    def is_fresh(self, entry: CacheEntry, window_ms: int | None = None, now: int | None = None) -> bool:
        window = self.freshness_ms if window_ms is None else window_ms
        ref = now_ms() if now is None else now
        return ref - entry.fetched_at_ms < window

    def read_fresh(self, now: int | None = None) -> CacheEntry | None:
        entry = self.read()
        if entry is not None and self.is_fresh(entry, now=now):
            return entry
        return None

    def write(self, batch: list[Quote], source: ProviderSource | None = None) -> CacheEntry:
        entry = CacheEntry(batch=list(batch), fetched_at_ms=now_ms(), source=source)
        # one bulk update so batch, time and source are never mixed across writes
        self.storage.update(
            {
                STOCKS_KEY: json.dumps([q.model_dump() for q in entry.batch]),
                STOCKS_TIME_KEY: str(entry.fetched_at_ms),
                STOCKS_SOURCE_KEY: source or "",
            }
        )
        return entry

    def clear(self) -> None:
        for key in (STOCKS_KEY, STOCKS_TIME_KEY, STOCKS_SOURCE_KEY):
            self.storage.pop(key, None)
