"""Chart planning: time-axis resolution and chart-ready point series."""

from collections.abc import Sequence
from datetime import datetime

from dashboard.schemas.chart import ChartConfig, ChartPoint, ChartSeries, SegmentStyle, TimeScale
from dashboard.schemas.status import Sample, ViewWindow

ONLINE_COLOR = "rgba(46, 204, 113, 0.8)"
OFFLINE_COLOR = "rgba(231, 76, 60, 0.8)"

LATENCY_LABEL = "Latency (ms)"
STATUS_LABEL = "Connection Status"

DISPLAY_FORMATS = {"minute": "HH:mm", "hour": "HH:mm", "day": "dd MMM"}

# (upper bound in hours, inclusive) -> (unit, step); None is unbounded
_SCALE_TABLE: tuple[tuple[float | None, str, int], ...] = (
    (0.5, "minute", 5),
    (2, "minute", 15),
    (6, "hour", 1),
    (24, "hour", 2),
    (72, "hour", 6),
    (None, "day", 1),
)


def select_time_scale(start: datetime, end: datetime) -> TimeScale:
    """Pick the x-axis unit and step for a window of the given length."""
    hours = (end - start).total_seconds() / 3600.0
    for upper, unit, step in _SCALE_TABLE:
        if upper is None or hours <= upper:
            return TimeScale(unit=unit, step=step)
    raise AssertionError("unreachable: last scale row is unbounded")


def classify(value: float) -> SegmentStyle:
    """Color and label for a status-series value: below 1 is offline."""
    if value < 1:
        return SegmentStyle(color=OFFLINE_COLOR, label="Offline")
    return SegmentStyle(color=ONLINE_COLOR, label="Online")


def build_chart_config(samples: Sequence[Sample], window: ViewWindow) -> ChartConfig:
    """Build latency and status series clipped to ``window``.

    Both series carry one point per in-window sample; latency is None for
    offline samples so the line breaks instead of interpolating.
    """
    latency = ChartSeries(label=LATENCY_LABEL, axis="y-latency")
    status = ChartSeries(label=STATUS_LABEL, axis="y-status", stepped=True)

    for sample in samples:
        if not window.start <= sample.timestamp <= window.end:
            continue
        value = 1 if sample.is_online else 0
        latency.points.append(
            ChartPoint(x=sample.timestamp, y=sample.latency_ms if sample.is_online else None)
        )
        status.points.append(ChartPoint(x=sample.timestamp, y=value, color=classify(value).color))

    return ChartConfig(
        x_min=window.start,
        x_max=window.end,
        time_scale=select_time_scale(window.start, window.end),
        display_formats=dict(DISPLAY_FORMATS),
        latency=latency,
        status=status,
    )
