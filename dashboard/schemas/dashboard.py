from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from dashboard.schemas.status import CurrentStatus


class PaginationState(BaseModel):
    current_page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_pages: int = Field(ge=1)
    total_items: int = 0


class DisplayStats(BaseModel):
    """Summary stats formatted for display and reports."""

    outage_count: str
    total_outage_duration: str
    average_outage_duration: str
    average_latency: str


class StatsResponse(BaseModel):
    outage_count: int
    total_outage_seconds: float
    average_outage_seconds: float
    average_latency_ms: float
    display: DisplayStats


class OutageItem(BaseModel):
    start: datetime
    end: datetime
    duration_seconds: float
    duration: str
    is_open: bool = False


class OutagePageResponse(BaseModel):
    outages: list[OutageItem]
    pagination: PaginationState


class WindowResponse(BaseModel):
    start: datetime
    end: datetime
    hours: float


class DashboardViewResponse(BaseModel):
    loading: bool = False
    error: str | None = None  # set when the last manual refresh failed
    evaluated_at: datetime | None = None
    window: WindowResponse | None = None
    status: CurrentStatus
    stats: StatsResponse | None = None
    outages: OutagePageResponse
    refresh_interval: int | Literal["off"] = "off"


class PageNavigationRequest(BaseModel):
    delta: int


class PageNavigationResponse(BaseModel):
    moved: bool
    pagination: PaginationState


class RefreshPolicyResponse(BaseModel):
    interval_seconds: int | Literal["off"]
    armed: bool


class ThemeResponse(BaseModel):
    theme: Literal["light", "dark"]
