"""Typed models for the battery monitor data-source responses.

Every numeric field goes through an explicit parse-with-default helper from
:mod:`battmon.telemetry.coerce`, so a missing or non-numeric value becomes its
documented fallback instead of a validation error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from battmon.common.enums import ThermalState
from battmon.telemetry.coerce import (
    DEFAULT_TEMPERATURE_LIMIT,
    FAN_OFF,
    FAN_ON,
    parse_fan_status,
    parse_float,
    parse_int,
)
from battmon.utils.time import TimeUtils

# ─────────────────────────── readings ────────────────────────────────────────


class Reading(BaseModel):
    """Measurements shared by live samples and history rows."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    # Temperature excess over the limit above which the state is critical
    CRITICAL_EXCESS: ClassVar[float] = 5.0

    voltage: float = 0.0
    current: float = 0.0
    temperature: float = 0.0
    battery_percent: float = Field(0.0, alias="battery")
    temperature_limit: float = Field(DEFAULT_TEMPERATURE_LIMIT, alias="temp_limit")
    fan_on: bool = Field(False, alias="fan_status")

    @field_validator("voltage", "current", "temperature", "battery_percent", mode="before")
    @classmethod
    def coerce_measurement(cls, v: Any) -> float:
        return parse_float(v, 0.0)

    @field_validator("temperature_limit", mode="before")
    @classmethod
    def coerce_limit(cls, v: Any) -> float:
        return parse_float(v, DEFAULT_TEMPERATURE_LIMIT)

    @field_validator("fan_on", mode="before")
    @classmethod
    def coerce_fan(cls, v: Any) -> bool:
        return parse_fan_status(v) == FAN_ON

    @property
    def power(self) -> float:
        """Instantaneous power in watts (voltage x current)."""
        return self.voltage * self.current

    @property
    def fan_status(self) -> str:
        """Fan state as the "ON"/"OFF" label used by the data source."""
        return FAN_ON if self.fan_on else FAN_OFF

    @property
    def temperature_excess(self) -> float:
        """Degrees above the temperature limit (negative when below)."""
        return self.temperature - self.temperature_limit

    @property
    def thermal_state(self) -> ThermalState:
        """Classify the temperature against the configured limit."""
        excess = self.temperature_excess
        if excess > self.CRITICAL_EXCESS:
            return ThermalState.CRITICAL
        if excess > 0:
            return ThermalState.ABOVE_LIMIT
        return ThermalState.NORMAL


class TelemetrySample(Reading):
    """One normalized live reading from ``action=getLatest``."""

    remaining_time_seconds: int = Field(0, alias="remaining_time")
    captured_at: datetime = Field(default_factory=TimeUtils.now_localized, alias="timestamp")

    @field_validator("remaining_time_seconds", mode="before")
    @classmethod
    def coerce_remaining(cls, v: Any) -> int:
        return parse_int(v, 0)

    @field_validator("captured_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> datetime:
        return TimeUtils.parse_timestamp(v) or TimeUtils.now_localized()


class HistoryRecord(Reading):
    """One row of ``action=getHistory``."""

    date: str | None = None
    time: str | None = None

    @field_validator("date", "time", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None


# ─────────────────────────── pagination ──────────────────────────────────────


class HistoryPage(BaseModel):
    """A single server-side page of history records.

    Replaced wholesale on every successful fetch; pages are never merged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    records: list[HistoryRecord] = Field(default_factory=list)
    page: int = 1
    total_pages: int = Field(1, alias="totalPages")
    total_records: int = Field(0, alias="totalRecords")

    @field_validator("page", "total_pages", mode="before")
    @classmethod
    def coerce_page(cls, v: Any) -> int:
        return max(parse_int(v, 1), 1)

    @field_validator("total_records", mode="before")
    @classmethod
    def coerce_total(cls, v: Any) -> int:
        return max(parse_int(v, 0), 0)

    @classmethod
    def empty(cls) -> HistoryPage:
        """The page shown before any history has been loaded."""
        return cls()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> HistoryPage:
        """Build a page from a ``getHistory`` response body.

        Args:
            payload: Decoded JSON with ``data`` and ``pagination`` keys

        Returns:
            Validated HistoryPage
        """
        rows = payload.get("data") or []
        pagination = payload.get("pagination") or {}
        if not isinstance(pagination, dict):
            pagination = {}
        return cls.model_validate(
            {
                "records": [row for row in rows if isinstance(row, dict)],
                "page": pagination.get("page"),
                "totalPages": pagination.get("totalPages"),
                "totalRecords": pagination.get("totalRecords", len(rows)),
            }
        )

    @property
    def has_next(self) -> bool:
        """Whether a later page exists."""
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        """Whether an earlier page exists."""
        return self.page > 1


# ─────────────────────────── envelopes ───────────────────────────────────────


@dataclass(frozen=True)
class LatestReading:
    """Result of a successful ``getLatest`` call.

    ``sample`` is None when the server answered "success" without data.
    """

    sample: TelemetrySample | None
    device_connected: bool | None = None
    seconds_since_last: int | None = None

    @property
    def has_data(self) -> bool:
        return self.sample is not None


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of the ``action=test`` connectivity probe."""

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
