"""Bounded rolling window of samples feeding the trend chart."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Final, NamedTuple

from battmon.telemetry.models import TelemetrySample
from battmon.utils.time import TimeUtils

DEFAULT_CAPACITY: Final = 30


class Metric(Enum):
    """Series selectable in the trend chart."""

    VOLTAGE = "voltage"
    CURRENT = "current"
    TEMPERATURE = "temperature"
    BATTERY = "battery"
    TEMPERATURE_LIMIT = "temp-limit"
    COMPARISON = "comparison"  # temperature minus temperature limit


class SeriesPoint(NamedTuple):
    """One buffered entry: an x-axis label and the metric vector."""

    label: str
    voltage: float
    current: float
    temperature: float
    battery: float
    temperature_limit: float

    @classmethod
    def from_sample(cls, sample: TelemetrySample, label: str) -> SeriesPoint:
        return cls(
            label=label,
            voltage=sample.voltage,
            current=sample.current,
            temperature=sample.temperature,
            battery=sample.battery_percent,
            temperature_limit=sample.temperature_limit,
        )

    def value(self, metric: Metric) -> float:
        """Value of ``metric`` at this point."""
        if metric is Metric.VOLTAGE:
            return self.voltage
        if metric is Metric.CURRENT:
            return self.current
        if metric is Metric.TEMPERATURE:
            return self.temperature
        if metric is Metric.BATTERY:
            return self.battery
        if metric is Metric.TEMPERATURE_LIMIT:
            return self.temperature_limit
        return self.temperature - self.temperature_limit


@dataclass(frozen=True)
class AxisRange:
    """Y-axis bounds for a chart."""

    minimum: float
    maximum: float


# Padding added below the minimum and above the maximum of each metric.
# Battery is a fixed 0-100 % axis.
METRIC_PADDING: Final[dict[Metric, float]] = {
    Metric.VOLTAGE: 0.5,
    Metric.CURRENT: 0.1,
    Metric.TEMPERATURE: 2.0,
    Metric.TEMPERATURE_LIMIT: 2.0,
    Metric.COMPARISON: 2.0,
}
BATTERY_RANGE: Final = AxisRange(0.0, 100.0)


class MetricView:
    """Lazy, restartable view of one metric over the buffer.

    Each iteration reads the buffer as it is at that moment, so the view
    stays index-aligned with :meth:`SeriesBuffer.labels`.
    """

    def __init__(self, points: deque[SeriesPoint], metric: Metric) -> None:
        self._points = points
        self.metric = metric

    def __iter__(self) -> Iterator[float]:
        return (point.value(self.metric) for point in self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"MetricView({self.metric.value}, {list(self)!r})"


class SeriesBuffer:
    """Fixed-capacity FIFO of :class:`SeriesPoint` entries.

    Appending at capacity evicts the oldest entry; entries are never
    reordered or modified.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, label_format: str = "%H:%M:%S") -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.label_format = label_format
        self._points: deque[SeriesPoint] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[SeriesPoint]:
        return iter(self._points)

    def append(self, sample: TelemetrySample, label: str | None = None) -> SeriesPoint:
        """Push a sample, evicting the oldest entry when full.

        Args:
            sample: Reading to buffer
            label: X-axis label; formatted from ``sample.captured_at`` if None

        Returns:
            The stored point
        """
        if label is None:
            label = TimeUtils.format_datetime(sample.captured_at, self.label_format)
        point = SeriesPoint.from_sample(sample, label)
        self._points.append(point)
        return point

    def clear(self) -> None:
        self._points.clear()

    def labels(self) -> list[str]:
        """X-axis labels in buffer order."""
        return [point.label for point in self._points]

    def select_metric(self, metric: Metric | str) -> MetricView:
        """View of one metric; accepts a :class:`Metric` or its value."""
        return MetricView(self._points, Metric(metric))

    def axis_range(self, metric: Metric | str) -> AxisRange | None:
        """Padded y-axis range of the visible window.

        Returns:
            AxisRange, or None for an empty window (battery is always 0-100)
        """
        metric = Metric(metric)
        if metric is Metric.BATTERY:
            return BATTERY_RANGE
        values = list(self.select_metric(metric))
        if not values:
            return None
        pad = METRIC_PADDING[metric]
        return AxisRange(min(values) - pad, max(values) + pad)
