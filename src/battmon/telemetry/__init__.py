"""Telemetry package - holds the API client, payload models and custom errors."""

from .api import TelemetryAPI
from .errors import (
    ApplicationError,
    NetworkError,
    ParseError,
    RequestTimeoutError,
    TelemetryAPIError,
)
from .models import HistoryPage, HistoryRecord, LatestReading, ProbeResult, TelemetrySample
from .source import TelemetrySource, ThreadedTelemetrySource

__all__ = [
    "ApplicationError",
    "HistoryPage",
    "HistoryRecord",
    "LatestReading",
    "NetworkError",
    "ParseError",
    "ProbeResult",
    "RequestTimeoutError",
    "TelemetryAPI",
    "TelemetryAPIError",
    "TelemetrySample",
    "TelemetrySource",
    "ThreadedTelemetrySource",
]
