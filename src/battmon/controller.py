# filepath: src/battmon/controller.py
"""Core controller for the battery monitor dashboard."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Final

from battmon.display.console import ConsoleView
from battmon.export import write_history_csv
from battmon.monitor.history import HistoryPager
from battmon.monitor.notices import NoticeBoard
from battmon.monitor.session import DashboardSnapshot, MonitorSession
from battmon.scheduling.poller import CycleOutcome, PollingScheduler
from battmon.scheduling.ticker import DashboardView, LivenessTicker
from battmon.settings.application import ApplicationSettings
from battmon.settings.user import UserSettings
from battmon.telemetry.api import TelemetryAPI
from battmon.telemetry.models import ProbeResult
from battmon.telemetry.source import TelemetrySource, ThreadedTelemetrySource
from battmon.utils.time import TimeUtils

TEST_CONFIG_YAML = """\
api_endpoint: "http://localhost:8000/exec"
refresh_interval_ms: 2000
device_timeout_ms: 15000
series_capacity: 30
history_page_size: 50
"""

logger: Final = logging.getLogger(__name__)


class BatteryMonitor:
    """Main controller class for the battery monitor.

    This class wires the dashboard together:
    - Loading configuration and building the session
    - Probing the data source at start-up
    - Running the polling loop and the liveness ticker
    - Loading history pages and exporting them

    All dependencies can be injected, which is how the tests drive it.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        settings: UserSettings | None = None,
        api: TelemetryAPI | None = None,
        source: TelemetrySource | None = None,
        view: DashboardView | None = None,
        debug: bool = False,
    ):
        """Initialize the monitor controller.

        Args:
            config_path: Path to config.yaml (searched for if None)
            settings: Already-loaded settings; takes precedence over config_path
            api: Optional custom telemetry API client
            source: Optional async telemetry source (wraps ``api`` if None)
            view: Presentation layer rendered on every tick
            debug: Enable debug logging
        """
        # Configure logging
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )

        # Load configuration and initialize services
        self.config: UserSettings = settings or UserSettings.load(config_path)
        self.settings = ApplicationSettings(self.config)

        self.api = api or TelemetryAPI(self.config)
        self.source: TelemetrySource = source or ThreadedTelemetrySource(self.api)

        self.session = MonitorSession(
            series_capacity=self.config.series_capacity,
            label_format=self.config.label_format,
            notices=NoticeBoard(
                ttl=self.settings.notice_ttl,
                capacity=self.settings.notice_backlog,
                clock=self.now,
            ),
            gauges=self.settings.gauges,
            clock=self.now,
        )
        self.scheduler = PollingScheduler(
            self.session,
            self.source,
            interval_ms=self.settings.polling.interval_ms,
            fetch_timeout_s=self.settings.polling.fetch_timeout_s,
            clock=self.now,
        )
        self.pager = HistoryPager(
            self.source,
            self.session,
            page_size=self.config.history_page_size,
            timeout_s=self.settings.polling.fetch_timeout_s,
        )
        self.ticker = LivenessTicker(
            self.session,
            timeout=self.settings.ticks.device_timeout,
            view=view if view is not None else ConsoleView(),
            interval_s=self.settings.ticks.interval_s,
            clock=self.now,
        )

    def now(self) -> datetime:
        """Current time in the configured timezone (local time if unset)."""
        tz = self.config.get_timezone()
        now = TimeUtils.now_localized()
        return now.astimezone(tz) if tz else now

    async def probe(self) -> ProbeResult:
        """Run the connectivity probe under its own time bound."""
        timeout = self.settings.polling.probe_timeout_s
        try:
            return await asyncio.wait_for(self.source.test_connection(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Connection test timed out after %.1fs", timeout)
            return ProbeResult(False, f"Connection failed: Request timeout after {timeout:g}s")

    async def load_initial_data(self) -> bool:
        """Probe the endpoint and load the first history page.

        Returns:
            False if the probe failed (nothing else is loaded in that case)
        """
        logger.info("Loading initial data...")
        probe = await self.probe()
        if not probe.success:
            self.session.notices.error("Cannot connect to server. Check API endpoint.")
            return False

        logger.info("Connection test passed")
        await self.pager.load_page(1)
        self.session.notices.success("System loaded successfully")
        return True

    async def run(self, duration_s: float | None = None) -> None:
        """Run the dashboard until cancelled, or for ``duration_s`` seconds.

        Polling starts even if the start-up probe fails; every cycle is a
        reconnection attempt.
        """
        logger.info("Starting monitoring system...")
        await self.load_initial_data()

        self.scheduler.start()
        ticker_task = asyncio.get_running_loop().create_task(self.ticker.run())
        logger.info("System ready")
        try:
            if duration_s is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration_s)
        finally:
            self.scheduler.stop()
            ticker_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker_task
            await self.scheduler.drain()

    async def run_once(self) -> tuple[CycleOutcome, DashboardSnapshot]:
        """Run a single fetch cycle and tick, and return the resulting snapshot."""
        outcome = await self.scheduler.run_cycle()
        return outcome, self.ticker.tick()

    def export_history(self, path: Path | None = None) -> Path | None:
        """Export the displayed history page as CSV.

        Args:
            path: Destination; defaults to the dated file in the export directory

        Returns:
            The written path, or None when there was nothing to export
        """
        records = self.session.history.records
        if not records:
            self.session.notices.error("No data to export")
            return None
        dst = path or self.settings.paths.export_file(self.now().date())
        write_history_csv(records, dst)
        self.session.notices.success(f"Data exported: {dst.name}")
        return dst

    @classmethod
    def create_for_testing(
        cls,
        source: TelemetrySource,
        settings: UserSettings | None = None,
        view: DashboardView | None = None,
    ) -> BatteryMonitor:
        """Create a BatteryMonitor wired to a fake source.

        Args:
            source: Fake async telemetry source
            settings: Settings to use (parsed from TEST_CONFIG_YAML if None)
            view: Optional view to capture renders

        Returns:
            BatteryMonitor instance configured for testing
        """
        import yaml

        cfg = settings or UserSettings.model_validate(yaml.safe_load(TEST_CONFIG_YAML))
        return cls(settings=cfg, source=source, view=view, debug=True)
