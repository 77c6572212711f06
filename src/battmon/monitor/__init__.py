"""Dashboard state: liveness, trend window, history paging and notices."""

from battmon.monitor.history import HistoryPager
from battmon.monitor.liveness import LivenessState, LivenessTracker
from battmon.monitor.notices import Notice, NoticeBoard
from battmon.monitor.series import AxisRange, Metric, MetricView, SeriesBuffer, SeriesPoint
from battmon.monitor.session import DashboardSnapshot, MonitorSession

__all__ = [
    "AxisRange",
    "DashboardSnapshot",
    "HistoryPager",
    "LivenessState",
    "LivenessTracker",
    "Metric",
    "MetricView",
    "MonitorSession",
    "Notice",
    "NoticeBoard",
    "SeriesBuffer",
    "SeriesPoint",
]
