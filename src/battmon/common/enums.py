from enum import Enum


class ConnectionStatus(Enum):
    """Overall health shown in the dashboard header.

    The value is the label the presentation layer displays.
    """

    ONLINE = "Online"  # server reachable and device reporting
    DEVICE_OFFLINE = "ESP Offline"  # server reachable, device silent
    OFFLINE = "Offline"  # server unreachable


class ThermalState(Enum):
    """Battery temperature relative to the configured limit."""

    NORMAL = "normal"
    ABOVE_LIMIT = "above_limit"
    CRITICAL = "critical"  # more than 5 degrees over the limit


class NoticeLevel(Enum):
    """Severity of a user-visible notice."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
