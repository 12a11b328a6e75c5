from __future__ import annotations

import threading
from typing import Callable

from stock_dashboard.errors import RefreshInProgressError
from stock_dashboard.schemas.dashboard import DashboardState
from stock_dashboard.schemas.quote import CacheEntry, FetchResult
from stock_dashboard.services.quote_cache import QuoteCache, now_ms
from stock_dashboard.services.quote_fetcher import QuoteFetcher
from stock_dashboard.services.sample_data import sample_batch

PROVIDER_LABELS = {
    "primary": "Alpha Vantage",
    "secondary": "Finnhub",
}

LOADING_STATE = DashboardState(status="LOADING", refresh_enabled=False)


class DashboardController:
    """View state machine: IDLE -> LOADING -> DISPLAYING, refresh re-enters LOADING.

    Status checks and the switch into LOADING happen under one lock so that
    concurrent mounts start a single fetch. The fetch itself runs unlocked.
    """

    def __init__(
        self,
        *,
        fetcher: QuoteFetcher,
        cache: QuoteCache,
        sample_provider: Callable[[], list] = sample_batch,
        on_state_change: Callable[[DashboardState], None] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.sample_provider = sample_provider
        self.on_state_change = on_state_change
        self._lock = threading.Lock()
        self._state = DashboardState()

    def _provider_label(self, source: str | None) -> str | None:
        if source == "primary":
            client = self.fetcher.primary_client
        elif source == "secondary":
            client = self.fetcher.secondary_client
        else:
            return None
        return getattr(client, "provider_name", None) or PROVIDER_LABELS[source]

    def _set_state(self, state: DashboardState) -> DashboardState:
        # caller holds self._lock
        self._state = state
        return self._state.model_copy(deep=True)

    def _notify(self, snapshot: DashboardState) -> None:
        print(
            f"[DASHBOARD][state] status={snapshot.status} source={snapshot.source} "
            f"quotes={len(snapshot.quotes)} sample={int(snapshot.using_sample_data)} "
            f"from_cache={int(snapshot.from_cache)}",
            flush=True,
        )
        if self.on_state_change is not None:
            self.on_state_change(snapshot)

    def _transition(self, state: DashboardState) -> DashboardState:
        with self._lock:
            snapshot = self._set_state(state)
        self._notify(snapshot)
        return snapshot

    def state(self) -> DashboardState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def _cached_state(self, entry: CacheEntry, *, stale: bool) -> DashboardState:
        return DashboardState(
            status="DISPLAYING",
            source="cache" if stale else entry.source,
            provider_label=self._provider_label(entry.source),
            quotes=entry.batch,
            from_cache=True,
            fetched_at_ms=entry.fetched_at_ms,
        )

    def _display_fetched(self, result: FetchResult) -> DashboardState:
        try:
            entry = self.cache.write(result.quotes, source=result.source)
        except OSError as exc:
            print(f"[CACHE][write_error] error={exc}", flush=True)
            entry = CacheEntry(batch=result.quotes, fetched_at_ms=now_ms(), source=result.source)
        return self._transition(
            DashboardState(
                status="DISPLAYING",
                source=result.source,
                provider_label=result.provider_name or self._provider_label(result.source),
                quotes=entry.batch,
                fetched_at_ms=entry.fetched_at_ms,
            )
        )

    def _display_fallback(self) -> DashboardState:
        entry = self.cache.read()
        if entry is not None:
            return self._transition(self._cached_state(entry, stale=True))
        return self._transition(
            DashboardState(
                status="DISPLAYING",
                source="sample",
                quotes=self.sample_provider(),
                using_sample_data=True,
            )
        )

    def _leave_loading(self) -> None:
        with self._lock:
            if self._state.status != "LOADING":
                return
            self._set_state(DashboardState())
        print("[DASHBOARD][state] status=IDLE reason=load_aborted", flush=True)

    def _load(self, loading: DashboardState) -> DashboardState:
        try:
            self._notify(loading)
            result = self.fetcher.fetch()
            if result.ok:
                return self._display_fetched(result)
        except Exception as exc:
            print(f"[DASHBOARD][load_error] error={exc}", flush=True)

        try:
            return self._display_fallback()
        finally:
            self._leave_loading()

    def mount(self) -> DashboardState:
        """Show a fresh cached batch if there is one, otherwise fetch."""
        with self._lock:
            if self._state.status == "LOADING":
                return self._state.model_copy(deep=True)
            entry = self.cache.read_fresh()
            if entry is not None:
                snapshot = self._set_state(self._cached_state(entry, stale=False))
            else:
                snapshot = self._set_state(LOADING_STATE)

        if snapshot.status == "LOADING":
            return self._load(snapshot)
        self._notify(snapshot)
        return snapshot

    def refresh(self) -> DashboardState:
        """Re-enter LOADING and fetch, even if a fetch is already in flight."""
        with self._lock:
            snapshot = self._set_state(LOADING_STATE)
        return self._load(snapshot)

    def try_refresh(self) -> DashboardState:
        """Like refresh, but raises RefreshInProgressError while loading."""
        with self._lock:
            if self._state.status == "LOADING":
                raise RefreshInProgressError("REFRESH_IN_PROGRESS")
            snapshot = self._set_state(LOADING_STATE)
        return self._load(snapshot)
