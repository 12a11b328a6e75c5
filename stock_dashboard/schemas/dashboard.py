from pydantic import BaseModel, Field

from stock_dashboard.schemas.quote import DashboardStatus, DisplaySource, Quote


class DashboardState(BaseModel):
    status: DashboardStatus = "IDLE"
    source: DisplaySource | None = None
    provider_label: str | None = None
    quotes: list[Quote] = Field(default_factory=list)
    using_sample_data: bool = False
    from_cache: bool = False
    fetched_at_ms: int | None = None
    refresh_enabled: bool = True
