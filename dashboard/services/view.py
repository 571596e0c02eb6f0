"""Response builders that turn the session into API payloads."""

from dashboard.schemas.dashboard import (
    DashboardViewResponse,
    OutageItem,
    OutagePageResponse,
    StatsResponse,
    WindowResponse,
)
from dashboard.schemas.status import CurrentStatus, OutageInterval, SummaryStats
from dashboard.services.refresh import DashboardSession
from dashboard.services.report import display_stats, format_duration


def stats_response(stats: SummaryStats) -> StatsResponse:
    return StatsResponse(
        outage_count=stats.outage_count,
        total_outage_seconds=stats.total_outage_duration.total_seconds(),
        average_outage_seconds=stats.average_outage_duration.total_seconds(),
        average_latency_ms=stats.average_latency,
        display=display_stats(stats),
    )


def outage_item(interval: OutageInterval) -> OutageItem:
    return OutageItem(
        start=interval.start,
        end=interval.end,
        duration_seconds=interval.duration.total_seconds(),
        duration=format_duration(interval.duration),
        is_open=interval.is_open,
    )


def outage_page(session: DashboardSession) -> OutagePageResponse:
    return OutagePageResponse(
        outages=[outage_item(i) for i in session.paginator.current_slice()],
        pagination=session.paginator.state(),
    )


def build_view(session: DashboardSession) -> DashboardViewResponse:
    """Current view; stats are withheld while loading or after a failed manual refresh."""
    result = session.result
    show_stats = result is not None and not session.loading and session.error is None

    window = None
    if result is not None:
        w = result.sample_set.window
        window = WindowResponse(start=w.start, end=w.end, hours=round(w.hours, 4))

    return DashboardViewResponse(
        loading=session.loading,
        error=session.error,
        evaluated_at=result.evaluated_at if result else None,
        window=window,
        status=result.status if result else CurrentStatus(state="unknown"),
        stats=stats_response(result.stats) if show_stats else None,
        outages=outage_page(session) if show_stats else OutagePageResponse(
            outages=[], pagination=session.paginator.state()
        ),
        refresh_interval=session.policy.interval_seconds,
    )
