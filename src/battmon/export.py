"""CSV export of the displayed history page."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from battmon.telemetry.models import HistoryRecord

logger: Final = logging.getLogger(__name__)

CSV_HEADER: Final = [
    "Date",
    "Time",
    "Voltage (V)",
    "Current (A)",
    "Temperature (°C)",
    "Battery (%)",
    "Fan Status",
    "Temp Limit (°C)",
    "Power (W)",
]


def history_rows(records: Iterable[HistoryRecord]) -> list[list[str]]:
    """Table rows (without header) for the given records."""
    return [
        [
            r.date or "",
            r.time or "",
            f"{r.voltage:g}",
            f"{r.current:g}",
            f"{r.temperature:g}",
            f"{r.battery_percent:g}",
            r.fan_status,
            f"{r.temperature_limit:g}",
            f"{r.power:.2f}",
        ]
        for r in records
    ]


def history_to_csv(records: Iterable[HistoryRecord]) -> str:
    """Render records as CSV text with the dashboard's column header."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(history_rows(records))
    return buffer.getvalue()


def write_history_csv(records: list[HistoryRecord], path: Path) -> Path:
    """Write records to ``path`` as UTF-8 CSV.

    Raises:
        ValueError: If there are no records to export
    """
    if not records:
        raise ValueError("No data to export")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(history_to_csv(records), encoding="utf-8")
    logger.info("Exported %d history rows to %s", len(records), path)
    return path
