"""Session state shared by the scheduler, the pager and the presentation layer."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from battmon.common.enums import ConnectionStatus, ThermalState
from battmon.monitor.liveness import LivenessState, LivenessTracker
from battmon.monitor.notices import Notice, NoticeBoard
from battmon.monitor.series import AxisRange, Metric, SeriesBuffer
from battmon.settings.application import DEFAULT_GAUGES, GaugeScale
from battmon.telemetry.models import HistoryPage, TelemetrySample
from battmon.utils.formatting import PLACEHOLDER, format_duration, format_measurement
from battmon.utils.time import TimeUtils


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the presentation layer needs for one render."""

    liveness: LivenessState
    sample: TelemetrySample | None
    labels: tuple[str, ...]
    series: Mapping[Metric, tuple[float, ...]]
    ranges: Mapping[Metric, AxisRange | None]
    history: HistoryPage
    uptime: timedelta
    notices: tuple[Notice, ...] = ()
    gauges: Mapping[str, float] = field(default_factory=dict)

    @property
    def status(self) -> ConnectionStatus:
        return self.liveness.status

    @property
    def thermal_state(self) -> ThermalState | None:
        return self.sample.thermal_state if self.sample else None

    @property
    def uptime_text(self) -> str:
        return format_duration(self.uptime)

    def display_values(self) -> dict[str, str]:
        """Formatted tile values; placeholders when there is no sample."""
        s = self.sample
        if s is None:
            return {
                "voltage": PLACEHOLDER,
                "current": PLACEHOLDER,
                "temperature": PLACEHOLDER,
                "battery": PLACEHOLDER,
                "temperature_limit": PLACEHOLDER,
                "remaining_time": PLACEHOLDER,
                "fan_status": PLACEHOLDER,
                "power": PLACEHOLDER,
            }
        return {
            "voltage": format_measurement(s.voltage, "V"),
            "current": format_measurement(s.current, "A"),
            "temperature": format_measurement(s.temperature, "°C"),
            "battery": format_measurement(s.battery_percent, "%"),
            "temperature_limit": format_measurement(s.temperature_limit, "°C"),
            "remaining_time": format_duration(timedelta(seconds=s.remaining_time_seconds)),
            "fan_status": s.fan_status,
            "power": format_measurement(s.power, "W"),
        }


class MonitorSession:
    """Owns all dashboard state for the lifetime of one run.

    Built explicitly and handed to the components that need it; nothing here
    is persisted.
    """

    def __init__(
        self,
        series_capacity: int = 30,
        label_format: str = "%H:%M:%S",
        notices: NoticeBoard | None = None,
        gauges: Mapping[str, GaugeScale] | None = None,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        self.tracker = LivenessTracker()
        self.buffer = SeriesBuffer(series_capacity, label_format)
        self.notices = notices or NoticeBoard(clock=clock)
        self.gauges = dict(gauges or DEFAULT_GAUGES)
        self.current_sample: TelemetrySample | None = None
        self.history: HistoryPage = HistoryPage.empty()
        self.started_at = clock()

    def apply_sample(
        self,
        sample: TelemetrySample,
        now: datetime,
        device_connected: bool | None = None,
        reported_age_s: int | None = None,
    ) -> None:
        """Record a successful fetch that carried data."""
        self.tracker.record_success(now, device_connected, reported_age_s)
        self.current_sample = sample
        self.buffer.append(sample, TimeUtils.format_datetime(now, self.buffer.label_format))

    def apply_no_data(self) -> None:
        """Record a successful fetch without data; placeholders are shown."""
        self.tracker.record_no_data()
        self.current_sample = None

    def apply_failure(self) -> None:
        """Record a failed fetch; placeholders are shown."""
        self.tracker.record_failure()
        self.current_sample = None

    def gauge_levels(self) -> dict[str, float]:
        """Gauge fill levels (0-100) for the current sample."""
        s = self.current_sample
        if s is None:
            return {}
        values = {
            "voltage": s.voltage,
            "current": s.current,
            "temperature": s.temperature,
            "battery": s.battery_percent,
            "temperature_limit": s.temperature_limit,
        }
        return {
            name: scale.percent(values[name])
            for name, scale in self.gauges.items()
            if name in values
        }

    def snapshot(self, now: datetime) -> DashboardSnapshot:
        """Read-only view of the session for rendering."""
        return DashboardSnapshot(
            liveness=self.tracker.state,
            sample=self.current_sample,
            labels=tuple(self.buffer.labels()),
            series={m: tuple(self.buffer.select_metric(m)) for m in Metric},
            ranges={m: self.buffer.axis_range(m) for m in Metric},
            history=self.history,
            uptime=now - self.started_at,
            notices=tuple(self.notices.active(now)),
            gauges=self.gauge_levels(),
        )
