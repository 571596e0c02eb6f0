"""Unit tests for refresh cycles, the auto-refresh timer and stale-response handling."""

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio

from dashboard.core.exceptions import FetchFailureError, InvalidWindowError
from dashboard.schemas.status import RefreshPolicy, SampleSet, ViewWindow, WindowSelection
from dashboard.services.refresh import RefreshController, run_cycle
from tests.helpers import T0, FakeClock, StaticSource, make_sample


async def _fast_sleep(_seconds):
    await asyncio.sleep(0)


async def _spin(times: int = 50):
    for _ in range(times):
        await asyncio.sleep(0)


class GatedSource(StaticSource):
    """Source whose fetches block until the test releases them, in any order."""

    def __init__(self, samples=None):
        super().__init__(samples)
        self.gates: list[asyncio.Event] = []

    async def fetch_samples(self, window: ViewWindow) -> SampleSet:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return await super().fetch_samples(window)


def _outage_samples():
    return [
        make_sample(T0 - timedelta(minutes=30), True, 20),
        make_sample(T0 - timedelta(minutes=20), False),
        make_sample(T0 - timedelta(minutes=15), True, 40),
        make_sample(T0 - timedelta(minutes=5), False),
    ]


@pytest.fixture
def source():
    return StaticSource(_outage_samples())


@pytest_asyncio.fixture
async def controller(source, clock):
    c = RefreshController(source, window=WindowSelection(preset_hours=1), clock=clock)
    yield c
    await c.close()


class TestRunCycle:
    def test_all_stages_share_evaluation_instant(self):
        window = ViewWindow(start=T0 - timedelta(hours=1), end=T0)
        result = run_cycle(SampleSet(window=window, samples=tuple(_outage_samples())), T0, sequence=7)
        assert result.sequence == 7
        assert result.evaluated_at == T0
        assert result.intervals[0].end == T0
        assert result.stats.total_outage_duration == timedelta(minutes=10)
        assert result.chart.x_max == T0
        assert result.status.state == "offline"


@pytest.mark.asyncio
class TestManualRefresh:
    async def test_commits_result(self, controller, source):
        result = await controller.refresh()
        assert result is not None
        assert controller.session.result is result
        assert result.stats.outage_count == 2
        assert controller.session.paginator.state().total_items == 2
        assert controller.session.loading is False
        assert controller.session.error is None

    async def test_window_ends_at_clock_time(self, controller, source):
        await controller.refresh()
        window = source.calls[0]
        assert window.end == T0
        assert window.start == T0 - timedelta(hours=1)

    async def test_open_outage_grows_between_cycles(self, controller, clock):
        first = await controller.refresh()
        clock.advance(minutes=2)
        second = await controller.refresh()
        assert second.stats.total_outage_duration - first.stats.total_outage_duration == timedelta(minutes=2)

    async def test_failure_is_surfaced_and_prior_result_kept(self, controller, source):
        good = await controller.refresh()
        source.fail = True
        with pytest.raises(FetchFailureError):
            await controller.refresh()
        assert controller.session.error is not None
        assert controller.session.result is good
        assert controller.session.loading is False

    async def test_success_clears_error(self, controller, source):
        source.fail = True
        with pytest.raises(FetchFailureError):
            await controller.refresh()
        source.fail = False
        await controller.refresh()
        assert controller.session.error is None


@pytest.mark.asyncio
class TestBackgroundRefresh:
    async def test_failure_is_swallowed(self, controller, source):
        good = await controller.refresh()
        source.fail = True
        assert await controller.refresh(manual=False) is None
        assert controller.session.error is None
        assert controller.session.result is good

    async def test_does_not_set_loading(self, controller):
        await controller.refresh(manual=False)
        assert controller.session.loading is False


@pytest.mark.asyncio
class TestStaleResponses:
    async def test_older_response_arriving_late_is_discarded(self, clock):
        source = GatedSource(_outage_samples())
        controller = RefreshController(source, window=WindowSelection(preset_hours=1), clock=clock)

        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        clock.advance(minutes=1)
        second = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        assert len(source.gates) == 2

        source.gates[1].set()
        newer = await second
        source.gates[0].set()
        older = await first

        assert older is None
        assert newer is not None
        assert controller.session.result is newer
        assert controller.session.result.evaluated_at == T0 + timedelta(minutes=1)

    async def test_stale_failure_does_not_mark_error(self, clock):
        source = GatedSource(_outage_samples())
        controller = RefreshController(source, window=WindowSelection(preset_hours=1), clock=clock)

        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)

        source.gates[1].set()
        await second
        source.fail = True
        source.gates[0].set()
        assert await first is None
        assert controller.session.error is None

    async def test_failed_background_cycle_leaves_manual_cycle_pending(self, clock):
        source = GatedSource(_outage_samples())
        controller = RefreshController(source, window=WindowSelection(preset_hours=1), clock=clock)

        manual = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        background = asyncio.create_task(controller.refresh(manual=False))
        await asyncio.sleep(0)
        assert len(source.gates) == 2

        source.fail = True
        source.gates[1].set()
        assert await background is None
        assert controller.session.loading is True
        assert controller.session.error is None

        source.fail = False
        source.gates[0].set()
        result = await manual
        assert result is not None
        assert controller.session.result is result
        assert controller.session.loading is False

    async def test_failed_background_cycle_only_withdraws_itself(self, clock):
        source = GatedSource(_outage_samples())
        controller = RefreshController(source, window=WindowSelection(preset_hours=1), clock=clock)

        oldest = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        newer = asyncio.create_task(controller.refresh(manual=False))
        await asyncio.sleep(0)
        failing = asyncio.create_task(controller.refresh(manual=False))
        await asyncio.sleep(0)

        source.fail = True
        source.gates[2].set()
        assert await failing is None

        source.fail = False
        source.gates[1].set()
        committed = await newer
        assert committed is not None

        source.gates[0].set()
        assert await oldest is None
        assert controller.session.result is committed


@pytest.mark.asyncio
class TestWindowSelection:
    async def test_zero_length_custom_window_rejected_before_fetch(self, controller, source):
        await controller.refresh()
        calls_before = len(source.calls)
        previous = controller.session.window_selection
        with pytest.raises(InvalidWindowError):
            await controller.set_window(WindowSelection(hours=0, minutes=0))
        assert len(source.calls) == calls_before
        assert controller.session.window_selection is previous

    async def test_custom_window_reloads(self, controller, source):
        result = await controller.set_window(WindowSelection(hours=0, minutes=10))
        assert source.calls[-1].start == T0 - timedelta(minutes=10)
        # Only the trailing outage starts inside the last ten minutes
        assert result.stats.outage_count == 1
        assert result.chart.time_scale.unit == "minute"

    async def test_page_survives_refresh(self, clock):
        samples = []
        for i in range(30):
            samples.append(make_sample(T0 - timedelta(minutes=60 - 2 * i), False))
            samples.append(make_sample(T0 - timedelta(minutes=59 - 2 * i), True, 10))
        controller = RefreshController(StaticSource(samples), window=WindowSelection(preset_hours=2), clock=clock)
        await controller.refresh()
        assert controller.session.paginator.total_pages == 3
        assert controller.advance_page(1)
        await controller.refresh(manual=False)
        assert controller.session.paginator.current_page == 2


@pytest.mark.asyncio
class TestRefreshPolicy:
    async def test_starts_idle(self, controller):
        assert controller.state == "idle"
        assert controller.policy.is_off

    async def test_arm_and_disarm(self, controller):
        controller.set_policy(RefreshPolicy(interval_seconds=30))
        assert controller.state == "armed"
        controller.set_policy(RefreshPolicy(interval_seconds="off"))
        assert controller.state == "idle"

    async def test_new_policy_cancels_previous_timer(self, controller):
        controller.set_policy(RefreshPolicy(interval_seconds=30))
        old_timer = controller._timer
        controller.set_policy(RefreshPolicy(interval_seconds=60))
        await _spin(3)
        assert old_timer.cancelled()
        assert controller._timer is not old_timer
        assert controller.state == "armed"

    async def test_ticks_run_background_cycles_until_off(self, source, clock):
        controller = RefreshController(
            source, window=WindowSelection(preset_hours=1), clock=clock, sleep=_fast_sleep
        )
        controller.set_policy(RefreshPolicy(interval_seconds=5))
        await _spin()
        assert len(source.calls) > 0
        assert controller.session.result is not None

        controller.set_policy(RefreshPolicy(interval_seconds="off"))
        await _spin(5)
        calls_after_off = len(source.calls)
        await _spin()
        assert len(source.calls) == calls_after_off
        assert controller.state == "idle"
        await controller.close()

    async def test_background_failures_keep_timer_running(self, source, clock):
        controller = RefreshController(
            source, window=WindowSelection(preset_hours=1), clock=clock, sleep=_fast_sleep
        )
        source.fail = True
        controller.set_policy(RefreshPolicy(interval_seconds=5))
        await _spin()
        assert len(source.calls) > 1
        assert controller.state == "armed"
        assert controller.session.error is None
        await controller.close()
        assert controller.state == "idle"

    async def test_close_waits_for_in_flight_cycle(self, clock):
        source = GatedSource(_outage_samples())
        controller = RefreshController(
            source, window=WindowSelection(preset_hours=1), clock=clock, sleep=_fast_sleep
        )
        controller.set_policy(RefreshPolicy(interval_seconds=5))
        await _spin()
        assert len(source.gates) == 1

        closing = asyncio.create_task(controller.close())
        await _spin()
        assert not closing.done()
        assert controller.state == "idle"

        source.gates[0].set()
        await closing
        assert controller.session.result is not None
        assert len(source.gates) == 1
