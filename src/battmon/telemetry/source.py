"""Asyncio adapter around the blocking telemetry client."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from battmon.telemetry.api import TelemetryAPI
from battmon.telemetry.models import HistoryPage, LatestReading, ProbeResult


@runtime_checkable
class TelemetrySource(Protocol):
    """Protocol for anything the scheduler and pager can fetch from."""

    async def test_connection(self) -> ProbeResult:
        """Run the connectivity probe."""
        ...

    async def fetch_latest(self) -> LatestReading:
        """Fetch the latest device reading."""
        ...

    async def fetch_history(self, page: int, limit: int) -> HistoryPage:
        """Fetch one history page."""
        ...


class ThreadedTelemetrySource:
    """Runs :class:`TelemetryAPI` calls in a worker thread.

    Only the blocking I/O leaves the event loop; results are handed back to
    the awaiting coroutine so all state changes stay on the loop thread.
    """

    def __init__(self, api: TelemetryAPI) -> None:
        self.api = api

    async def test_connection(self) -> ProbeResult:
        return await asyncio.to_thread(self.api.test_connection)

    async def fetch_latest(self) -> LatestReading:
        return await asyncio.to_thread(self.api.fetch_latest)

    async def fetch_history(self, page: int, limit: int) -> HistoryPage:
        return await asyncio.to_thread(self.api.fetch_history, page, limit)
