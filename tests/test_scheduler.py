import asyncio

import pytest
from conftest import FakeClock, FakeSource, make_sample

from battmon.common.enums import ConnectionStatus, NoticeLevel
from battmon.monitor.session import MonitorSession
from battmon.scheduling import CycleOutcome, PollingScheduler
from battmon.telemetry.errors import ApplicationError, NetworkError
from battmon.telemetry.models import LatestReading


@pytest.fixture
def session(clock: FakeClock) -> MonitorSession:
    return MonitorSession(clock=clock)


@pytest.fixture
def scheduler(session: MonitorSession, source: FakeSource, clock: FakeClock) -> PollingScheduler:
    return PollingScheduler(session, source, interval_ms=2000, fetch_timeout_s=1.0, clock=clock)


def test_successful_cycle_updates_session(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample(voltage=25.1))]

    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.APPLIED
    assert session.current_sample is not None
    assert session.current_sample.voltage == 25.1
    assert session.tracker.status is ConnectionStatus.ONLINE
    assert session.buffer.labels() == ["12:00:00"]


def test_success_without_data_shows_device_offline(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample()), LatestReading(None)]

    asyncio.run(scheduler.run_cycle())
    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.NO_DATA

    assert session.current_sample is None
    assert session.tracker.status is ConnectionStatus.DEVICE_OFFLINE
    assert len(session.buffer) == 1
    notice = session.notices.latest
    assert notice is not None
    assert notice.level is NoticeLevel.INFO
    assert notice.message == "No data available from server"
    assert set(session.snapshot(session.started_at).display_values().values()) == {"--"}


def test_failure_marks_offline_and_reports(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample()), NetworkError("Network error: refused")]

    asyncio.run(scheduler.run_cycle())
    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.FAILED

    assert session.tracker.status is ConnectionStatus.OFFLINE
    assert session.current_sample is None
    assert session.notices.latest.message == "Failed to fetch data: Network error: refused"


def test_application_error_message_is_shown_as_is(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [ApplicationError("Server error: sheet not found")]

    asyncio.run(scheduler.run_cycle())
    assert session.notices.latest.message == "Server error: sheet not found"


def test_fetch_timeout_is_a_failure(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    scheduler.fetch_timeout_s = 0.01
    source.latest = [LatestReading(make_sample())]
    source.latest_delays = [0.5]

    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.FAILED
    assert session.notices.latest.message == "Failed to fetch data: Request timeout after 0.01s"


def test_stale_completion_is_discarded(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample(voltage=1)), LatestReading(make_sample(voltage=2))]
    source.latest_delays = [0.1, 0]

    async def overlap() -> list[CycleOutcome]:
        return list(await asyncio.gather(scheduler.run_cycle(), scheduler.run_cycle()))

    assert asyncio.run(overlap()) == [CycleOutcome.DISCARDED, CycleOutcome.APPLIED]
    assert session.current_sample.voltage == 2
    assert len(session.buffer) == 1


def test_stale_failure_is_discarded(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [NetworkError("late"), LatestReading(make_sample())]
    source.latest_delays = [0.1, 0]

    async def overlap() -> list[CycleOutcome]:
        return list(await asyncio.gather(scheduler.run_cycle(), scheduler.run_cycle()))

    assert asyncio.run(overlap()) == [CycleOutcome.DISCARDED, CycleOutcome.APPLIED]
    assert session.tracker.status is ConnectionStatus.ONLINE


def test_stop_cancels_in_flight_cycles(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample())]
    source.latest_delays = [0.2]

    async def start_then_stop() -> CycleOutcome:
        cycle = asyncio.create_task(scheduler.run_cycle())
        await asyncio.sleep(0.01)
        scheduler.stop()
        return await cycle

    assert asyncio.run(start_then_stop()) is CycleOutcome.DISCARDED
    assert session.current_sample is None
    assert session.tracker.status is ConnectionStatus.OFFLINE


def test_loop_polls_until_stopped(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [LatestReading(make_sample(voltage=v)) for v in range(50)]

    async def poll() -> None:
        scheduler.start(interval_ms=10)
        assert scheduler.running
        await asyncio.sleep(0.065)
        scheduler.stop()
        await scheduler.drain()
        assert not scheduler.running

    asyncio.run(poll())
    assert 3 <= len(session.buffer) <= 10
    assert list(session.buffer.select_metric("voltage")) == [
        float(v) for v in range(len(session.buffer))
    ]


def test_start_twice_is_rejected(scheduler: PollingScheduler, source: FakeSource) -> None:
    source.latest = [LatestReading(None)] * 5

    async def start_twice() -> None:
        scheduler.start()
        try:
            with pytest.raises(RuntimeError):
                scheduler.start()
        finally:
            scheduler.stop()
            await scheduler.drain()

    asyncio.run(start_twice())


def test_interval_change_posts_notice(
    scheduler: PollingScheduler, session: MonitorSession
) -> None:
    scheduler.interval_ms = 5000
    assert scheduler.interval_ms == 5000
    assert session.notices.latest.message == "Refresh rate: 5 seconds"

    scheduler.interval_ms = 500
    assert session.notices.latest.message == "Refresh rate: 0.5 seconds"

    with pytest.raises(ValueError):
        scheduler.interval_ms = 0


def test_unexpected_error_is_a_failure(
    scheduler: PollingScheduler, session: MonitorSession, source: FakeSource
) -> None:
    source.latest = [
        LatestReading(make_sample()),
        OverflowError("int too large to convert to float"),
    ]

    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.APPLIED
    assert asyncio.run(scheduler.run_cycle()) is CycleOutcome.FAILED

    assert session.tracker.status is ConnectionStatus.OFFLINE
    assert session.current_sample is None
    assert session.notices.latest.message == (
        "Failed to fetch data: Unexpected error: int too large to convert to float"
    )
