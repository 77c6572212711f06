from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from battmon.settings.user import UserSettings
from battmon.telemetry.models import HistoryPage, LatestReading, ProbeResult, TelemetrySample

T0 = datetime(2025, 5, 3, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config() -> UserSettings:
    return UserSettings(api_endpoint="https://example.test/exec")


@pytest.fixture
def latest_payload() -> dict[str, Any]:
    return {
        "status": "success",
        "data": {
            "voltage": "24.5",
            "current": 1.2,
            "temperature": 31.0,
            "battery": 80,
            "remaining_time": 3600,
            "temp_limit": 45,
            "fan_status": "OFF",
            "timestamp": "2025-05-03T12:00:00Z",
        },
        "esp_connected": True,
        "time_since_last": 2,
    }


@pytest.fixture
def history_payload() -> dict[str, Any]:
    return {
        "status": "success",
        "data": [
            {
                "date": "2025-05-03",
                "time": "12:00:00",
                "voltage": 24.5,
                "current": 1.2,
                "temperature": 31,
                "battery": 80,
                "fan_status": "OFF",
                "temp_limit": 45,
            },
            {
                "date": "2025-05-03",
                "time": "12:00:02",
                "voltage": 24.4,
                "current": 1.1,
                "temperature": 47,
                "battery": 79,
                "fan_status": "ON",
                "temp_limit": 45,
            },
        ],
        "pagination": {"page": 1, "totalPages": 3, "totalRecords": 6},
    }


def make_sample(**overrides: Any) -> TelemetrySample:
    data: dict[str, Any] = {
        "voltage": 24.5,
        "current": 1.2,
        "temperature": 31.0,
        "battery": 80,
        "temp_limit": 45,
        "fan_status": "OFF",
        "timestamp": T0.isoformat(),
    }
    data.update(overrides)
    return TelemetrySample.model_validate(data)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeSource:
    """Async telemetry source returning queued results.

    Each queued item is either a value to return, an exception to raise, or
    a callable producing one of those. The ``*_delays`` attributes add sleeps.
    """

    def __init__(self) -> None:
        self.latest: list[Any] = []
        self.pages: dict[int, Any] = {}
        self.probe = ProbeResult(True, "Connection test passed")
        self.latest_delays: list[float] = []
        self.history_delays: dict[int, float] = {}
        self.history_calls: list[tuple[int, int]] = []

    async def test_connection(self) -> ProbeResult:
        return self.probe

    async def fetch_latest(self) -> LatestReading:
        delay = self.latest_delays.pop(0) if self.latest_delays else 0
        result = self.latest.pop(0)
        if delay:
            await asyncio.sleep(delay)
        return _resolve(result)

    async def fetch_history(self, page: int, limit: int) -> HistoryPage:
        self.history_calls.append((page, limit))
        delay = self.history_delays.get(page, 0)
        if delay:
            await asyncio.sleep(delay)
        return _resolve(self.pages[page])


def _resolve(result: Any) -> Any:
    if callable(result):
        result = result()
    if isinstance(result, Exception):
        raise result
    return result


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()
