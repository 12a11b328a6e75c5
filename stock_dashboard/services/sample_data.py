from __future__ import annotations

from stock_dashboard.schemas.quote import Quote

SAMPLE_QUOTES: tuple[Quote, ...] = (
    Quote(symbol="AAPL", price=172.0, change_pct=1.2),
    Quote(symbol="MSFT", price=320.0, change_pct=-0.8),
    Quote(symbol="GOOGL", price=135.0, change_pct=0.5),
    Quote(symbol="TSLA", price=275.0, change_pct=2.1),
)


def sample_batch() -> list[Quote]:
    """Fixed fallback set, returned as fresh copies so callers may mutate them."""
    return [q.model_copy() for q in SAMPLE_QUOTES]
