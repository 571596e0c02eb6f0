"""Shared builders and fakes for dashboard tests."""

from datetime import datetime, timedelta, timezone

from dashboard.core.exceptions import FetchFailureError
from dashboard.schemas.status import Sample, SampleSet, ViewWindow
from dashboard.services.history_client import HistorySource

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_sample(ts: datetime, online: bool, latency: float = 0.0) -> Sample:
    return Sample(timestamp=ts, is_online=online, latency_ms=latency)


def sample_dict(ts: datetime, online: bool, latency: float = 0.0) -> dict:
    return {"timestamp": ts.isoformat(), "is_online": online, "latency_ms": latency, "target": "8.8.8.8"}


class FakeClock:
    """Controllable clock; call it to read the time."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticSource(HistorySource):
    """In-memory history source that returns whatever samples it holds."""

    def __init__(self, samples: list[Sample] | None = None):
        self.samples = list(samples or [])
        self.fail = False
        self.calls: list[ViewWindow] = []

    async def fetch_samples(self, window: ViewWindow) -> SampleSet:
        self.calls.append(window)
        if self.fail:
            raise FetchFailureError("History backend returned error: 500")
        in_window = [s for s in self.samples if window.start <= s.timestamp <= window.end]
        return SampleSet(window=window, samples=tuple(in_window))
