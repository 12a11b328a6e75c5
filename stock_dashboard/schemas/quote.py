from typing import Literal

from pydantic import BaseModel, Field

ProviderSource = Literal["primary", "secondary"]
DisplaySource = Literal["primary", "secondary", "cache", "sample"]
DashboardStatus = Literal["IDLE", "LOADING", "DISPLAYING"]


class Quote(BaseModel):
    symbol: str = Field(min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    change_pct: float = Field(allow_inf_nan=False)


class CacheEntry(BaseModel):
    batch: list[Quote]
    fetched_at_ms: int
    source: ProviderSource | None = None


class FetchResult(BaseModel):
    quotes: list[Quote] = Field(default_factory=list)
    source: ProviderSource | None = None
    provider_name: str | None = None
    ok: bool = False
    error: str | None = None
