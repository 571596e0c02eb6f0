from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class TimeScale(BaseModel):
    unit: Literal["minute", "hour", "day"]
    step: int


class SegmentStyle(BaseModel):
    color: str
    label: str


class ChartPoint(BaseModel):
    x: datetime
    y: float | None = None  # None leaves a gap in the latency line
    color: str | None = None


class ChartSeries(BaseModel):
    label: str
    axis: str
    stepped: bool = False
    points: list[ChartPoint] = []


class ChartConfig(BaseModel):
    """Declarative chart description consumed by the charting surface."""

    x_min: datetime
    x_max: datetime
    time_scale: TimeScale
    display_formats: dict[str, str]
    tooltip_format: str = "dd MMM yyyy HH:mm:ss"
    latency: ChartSeries
    status: ChartSeries
