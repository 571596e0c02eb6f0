"""Refresh cycles: fetch, recompute and swap the dashboard's presented state."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from dashboard.core.exceptions import DashboardError
from dashboard.schemas.chart import ChartConfig
from dashboard.schemas.status import (
    CurrentStatus,
    OutageInterval,
    RefreshPolicy,
    SampleSet,
    SummaryStats,
    WindowSelection,
)
from dashboard.services.chart import build_chart_config
from dashboard.services.history_client import HistorySource
from dashboard.services.outages import extract_outages
from dashboard.services.pagination import Paginator
from dashboard.services.stats import aggregate_stats, current_status

logger = structlog.get_logger()

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CycleResult:
    """Everything one fetch-and-recompute cycle produced."""

    sequence: int
    evaluated_at: datetime
    sample_set: SampleSet
    intervals: list[OutageInterval]
    stats: SummaryStats
    status: CurrentStatus
    chart: ChartConfig


def run_cycle(sample_set: SampleSet, now: datetime, sequence: int = 0) -> CycleResult:
    """Run the analytics stages over one SampleSet, all against the same ``now``."""
    samples = sample_set.samples
    intervals = extract_outages(samples, now)
    return CycleResult(
        sequence=sequence,
        evaluated_at=now,
        sample_set=sample_set,
        intervals=intervals,
        stats=aggregate_stats(samples, intervals),
        status=current_status(samples),
        chart=build_chart_config(samples, sample_set.window),
    )


@dataclass
class DashboardSession:
    """Presented dashboard state, replaced as a unit at the end of each cycle."""

    window_selection: WindowSelection
    paginator: Paginator[OutageInterval]
    policy: RefreshPolicy = field(default_factory=RefreshPolicy)
    result: CycleResult | None = None
    loading: bool = False
    error: str | None = None  # shown in place of stats after a failed manual refresh

    def commit(self, result: CycleResult) -> None:
        self.result = result
        self.paginator.update(result.intervals)
        self.error = None
        self.loading = False


class RefreshController:
    """Owns the auto-refresh timer and runs fetch-and-recompute cycles.

    At most one repeating timer is armed at a time. Each cycle is tagged
    with a sequence number; a cycle that completes after a newer one was
    issued is discarded. A background cycle that fails is withdrawn and
    stops counting as newer.
    """

    def __init__(
        self,
        source: HistorySource,
        session: DashboardSession | None = None,
        *,
        page_size: int = 10,
        window: WindowSelection | None = None,
        clock: Clock = utc_now,
        sleep: Sleeper = asyncio.sleep,
    ):
        self._source = source
        self.session = session or DashboardSession(
            window_selection=window or WindowSelection(preset_hours=24),
            paginator=Paginator(page_size),
        )
        self._clock = clock
        self._sleep = sleep
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._issued = 0
        self._withdrawn: set[int] = set()

    @property
    def state(self) -> str:
        return "armed" if self._timer is not None and not self._timer.done() else "idle"

    @property
    def policy(self) -> RefreshPolicy:
        return self.session.policy

    def now(self) -> datetime:
        return self._clock()

    def set_policy(self, policy: RefreshPolicy) -> None:
        """Replace the refresh policy. Any armed timer is cancelled before a new one is armed."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        self.session.policy = policy
        if not policy.is_off:
            self._timer = asyncio.create_task(self._tick_loop(policy.interval_seconds))
        logger.info("refresh_policy_changed", interval=policy.interval_seconds, state=self.state)

    async def _tick_loop(self, interval: int) -> None:
        while True:
            await self._sleep(interval)
            # Shielded so cancelling the timer leaves an in-flight cycle running
            cycle = asyncio.create_task(self._background_cycle())
            self._in_flight.add(cycle)
            cycle.add_done_callback(self._in_flight.discard)
            await asyncio.shield(cycle)

    async def _background_cycle(self) -> None:
        try:
            await self.refresh(manual=False)
        except Exception:
            logger.exception("auto_refresh_error")

    async def refresh(self, manual: bool = True) -> CycleResult | None:
        """Run one cycle. Returns the committed result, or None if it was discarded.

        A manual cycle marks the session as loading and re-raises fetch
        failures after recording them on the session. A background cycle
        logs failures and leaves the presented state untouched.
        """
        self._issued += 1
        sequence = self._issued
        now = self._clock()
        window = self.session.window_selection.resolve(now)

        if manual:
            self.session.loading = True

        try:
            sample_set = await self._source.fetch_samples(window)
        except DashboardError as exc:
            if not manual:
                self._withdraw(sequence)
                logger.warning("background_refresh_failed", sequence=sequence, code=exc.code, error=exc.message)
                return None
            if sequence != self._issued:
                logger.info("stale_cycle_discarded", sequence=sequence, latest=self._issued, failed=True)
                return None
            self.session.loading = False
            self.session.error = exc.message
            logger.warning("manual_refresh_failed", code=exc.code, error=exc.message)
            raise

        if sequence != self._issued:
            logger.info("stale_cycle_discarded", sequence=sequence, latest=self._issued)
            return None

        result = run_cycle(sample_set, now, sequence)
        self.session.commit(result)
        self._withdrawn = {s for s in self._withdrawn if s > sequence}
        logger.info(
            "refresh_cycle_completed",
            sequence=sequence,
            manual=manual,
            samples=len(sample_set.samples),
            outages=result.stats.outage_count,
        )
        return result

    def _withdraw(self, sequence: int) -> None:
        """Drop a failed background cycle so it no longer supersedes older pending cycles."""
        self._withdrawn.add(sequence)
        while self._issued in self._withdrawn:
            self._withdrawn.discard(self._issued)
            self._issued -= 1

    async def set_window(self, selection: WindowSelection) -> CycleResult | None:
        """Switch the viewing window and reload. Invalid windows raise before anything changes."""
        selection.validate_length()
        self.session.window_selection = selection
        return await self.refresh(manual=True)

    def advance_page(self, delta: int) -> bool:
        return self.session.paginator.advance(delta)

    async def close(self) -> None:
        """Cancel the timer, then wait for it and any in-flight background cycle to finish."""
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info("refresh_controller_stopped")
