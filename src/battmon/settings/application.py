"""Internal application settings derived from user settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

from battmon.settings.user import UserSettings


@dataclass(frozen=True)
class GaugeScale:
    """Linear range mapped onto a 0-100 % gauge."""

    low: float
    high: float

    def percent(self, value: float) -> float:
        """Position of ``value`` within the scale, clamped to 0..100."""
        span = self.high - self.low
        if span <= 0:
            return 0.0
        return min(max((value - self.low) / span * 100, 0.0), 100.0)


# Gauge ranges of the dashboard tiles
DEFAULT_GAUGES: dict[str, GaugeScale] = {
    "voltage": GaugeScale(21.0, 29.4),
    "current": GaugeScale(0.0, 10.0),
    "temperature": GaugeScale(20.0, 40.0),
    "battery": GaugeScale(0.0, 100.0),
    "temperature_limit": GaugeScale(20.0, 60.0),
}


@dataclass(frozen=True)
class PollingSettings:
    """Cadence and bounds of the polling loop."""

    interval_ms: int = 2000
    fetch_timeout_s: float = 10.0
    probe_timeout_s: float = 5.0


@dataclass(frozen=True)
class TickSettings:
    """Liveness clock settings."""

    interval_s: float = 1.0
    device_timeout: timedelta = timedelta(milliseconds=15000)


@dataclass
class AppPaths:
    """Application file and directory paths."""

    export_dir: Path
    export_prefix: str = "battery-data"

    @classmethod
    def from_base_dir(cls, base_dir: Path) -> AppPaths:
        """Create paths from base directory."""
        return cls(export_dir=base_dir / "exports")

    def export_file(self, day: date) -> Path:
        """CSV export path for the given day."""
        return self.export_dir / f"{self.export_prefix}-{day.isoformat()}.csv"


class ApplicationSettings:
    """Application settings container.

    Combines user-provided configuration with application defaults:

    - Polling cadence and fetch bounds
    - Liveness tick period and device timeout
    - Export paths
    - Gauge scales for the dashboard tiles
    - How long a notice stays visible, and how many are kept

    Examples:
        user_settings = UserSettings.load()
        app_settings = ApplicationSettings(user_settings)
        path = app_settings.paths.export_file(date.today())
    """

    def __init__(
        self,
        user_settings: UserSettings,
        paths: AppPaths | None = None,
        polling: PollingSettings | None = None,
        ticks: TickSettings | None = None,
        gauges: dict[str, GaugeScale] | None = None,
        notice_ttl: timedelta = timedelta(seconds=3),
        notice_backlog: int = 50,
    ):
        """Initialize application settings with configuration sources."""
        self.user = user_settings
        self.paths = paths or AppPaths.from_base_dir(Path.cwd())
        self.polling = polling or PollingSettings(
            interval_ms=user_settings.refresh_interval_ms,
            fetch_timeout_s=user_settings.fetch_timeout_s,
            probe_timeout_s=user_settings.probe_timeout_s,
        )
        self.ticks = ticks or TickSettings(
            interval_s=user_settings.tick_interval_s,
            device_timeout=timedelta(milliseconds=user_settings.device_timeout_ms),
        )
        self.gauges = gauges or dict(DEFAULT_GAUGES)
        self.notice_ttl = notice_ttl
        self.notice_backlog = notice_backlog
