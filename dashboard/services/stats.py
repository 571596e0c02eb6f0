"""Summary statistics over one cycle's samples and outages."""

from collections.abc import Sequence
from datetime import timedelta

from dashboard.schemas.status import CurrentStatus, OutageInterval, Sample, SummaryStats


def average_latency(samples: Sequence[Sample]) -> float:
    """Mean latency of online samples with a positive latency, 0.0 if none qualify."""
    latencies = [s.latency_ms for s in samples if s.is_online and s.latency_ms > 0]
    if not latencies:
        return 0.0
    return sum(latencies) / len(latencies)


def aggregate_stats(samples: Sequence[Sample], intervals: Sequence[OutageInterval]) -> SummaryStats:
    total = sum((i.duration for i in intervals), timedelta(0))
    count = len(intervals)
    return SummaryStats(
        outage_count=count,
        total_outage_duration=total,
        average_outage_duration=total / count if count else timedelta(0),
        average_latency=average_latency(samples),
    )


def current_status(samples: Sequence[Sample]) -> CurrentStatus:
    """Status of the most recent probe, or ``unknown`` with no data."""
    if not samples:
        return CurrentStatus(state="unknown")
    latest = samples[-1]
    if latest.is_online:
        return CurrentStatus(state="online", latency_ms=latest.latency_ms, observed_at=latest.timestamp)
    return CurrentStatus(state="offline", observed_at=latest.timestamp)
