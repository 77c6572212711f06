"""Scheduling package: polling loop and liveness ticker."""

from battmon.scheduling.poller import CancellationToken, CycleOutcome, PollingScheduler
from battmon.scheduling.ticker import DashboardView, LivenessTicker

__all__ = [
    "CancellationToken",
    "CycleOutcome",
    "DashboardView",
    "LivenessTicker",
    "PollingScheduler",
]
