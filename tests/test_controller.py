import asyncio
from pathlib import Path

import pytest
from conftest import FakeSource, make_sample

from battmon.common.enums import ConnectionStatus, NoticeLevel
from battmon.controller import BatteryMonitor
from battmon.monitor.session import DashboardSnapshot
from battmon.scheduling import CycleOutcome
from battmon.telemetry.models import HistoryPage, LatestReading, ProbeResult


class RecordingView:
    def __init__(self) -> None:
        self.snapshots: list[DashboardSnapshot] = []

    def render(self, snapshot: DashboardSnapshot) -> None:
        self.snapshots.append(snapshot)


@pytest.fixture
def monitor(source: FakeSource, history_payload: dict) -> BatteryMonitor:
    source.pages = {1: HistoryPage.from_payload(history_payload)}
    return BatteryMonitor.create_for_testing(source, view=RecordingView())


def test_create_for_testing_uses_test_config(monitor: BatteryMonitor) -> None:
    assert monitor.config.api_endpoint == "http://localhost:8000/exec"
    assert monitor.pager.page_size == 50
    assert monitor.scheduler.interval_ms == 2000


def test_initial_load(monitor: BatteryMonitor, source: FakeSource) -> None:
    assert asyncio.run(monitor.load_initial_data()) is True
    assert source.history_calls == [(1, 50)]
    assert monitor.pager.current.total_records == 6
    notice = monitor.session.notices.latest
    assert notice is not None
    assert notice.level is NoticeLevel.SUCCESS
    assert notice.message == "System loaded successfully"


def test_initial_load_with_failed_probe(monitor: BatteryMonitor, source: FakeSource) -> None:
    source.probe = ProbeResult(False, "Connection failed: refused")
    assert asyncio.run(monitor.load_initial_data()) is False
    assert source.history_calls == []
    assert monitor.session.notices.latest.message == (
        "Cannot connect to server. Check API endpoint."
    )


def test_run_once(monitor: BatteryMonitor, source: FakeSource) -> None:
    source.latest = [LatestReading(make_sample(voltage=26.0))]
    outcome, snapshot = asyncio.run(monitor.run_once())
    assert outcome is CycleOutcome.APPLIED
    assert snapshot.status is ConnectionStatus.ONLINE
    assert snapshot.display_values()["voltage"] == "26.0 V"
    assert monitor.ticker.view.snapshots == [snapshot]


def test_run_polls_even_if_probe_fails(monitor: BatteryMonitor, source: FakeSource) -> None:
    source.probe = ProbeResult(False, "Connection failed: refused")
    source.latest = [LatestReading(make_sample())] * 5

    asyncio.run(monitor.run(duration_s=0.05))

    assert monitor.session.current_sample is not None
    assert not monitor.scheduler.running
    assert monitor.ticker.view.snapshots


def test_export_history(monitor: BatteryMonitor, tmp_path: Path) -> None:
    assert monitor.export_history(tmp_path / "none.csv") is None
    assert monitor.session.notices.latest.message == "No data to export"

    asyncio.run(monitor.pager.load_page(1))
    written = monitor.export_history(tmp_path / "history.csv")
    assert written == tmp_path / "history.csv"
    assert written.read_text(encoding="utf-8").startswith("Date,Time")
