"""Plain-text rendering of snapshots for the CLI."""

from __future__ import annotations

import logging
from typing import Final

from battmon.export import CSV_HEADER, history_rows
from battmon.monitor.session import DashboardSnapshot
from battmon.telemetry.models import HistoryPage

logger: Final = logging.getLogger(__name__)


def format_summary(snapshot: DashboardSnapshot) -> str:
    """One-line dashboard summary, e.g. ``Online | 24.5 V | 1.2 A | ...``."""
    values = snapshot.display_values()
    liveness = snapshot.liveness
    parts = [
        snapshot.status.value,
        values["voltage"],
        values["current"],
        values["temperature"],
        values["battery"],
        f"limit {values['temperature_limit']}",
        f"fan {values['fan_status']}",
        values["power"],
    ]
    if liveness.last_success_at is not None:
        parts.append(f"last update {liveness.seconds_since_last_success}s ago")
    parts.append(f"uptime {snapshot.uptime_text}")
    return " | ".join(parts)


def format_history(page: HistoryPage) -> str:
    """History page as an aligned text table."""
    if not page.records:
        return "No historical data available"
    rows = [CSV_HEADER, *history_rows(page.records)]
    widths = [max(len(row[i]) for row in rows) for i in range(len(CSV_HEADER))]
    lines = ["  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip() for row in rows]
    lines.append(
        f"Page {page.page}/{page.total_pages} - {page.total_records} records total"
    )
    return "\n".join(lines)


class ConsoleView:
    """Logs a summary line on every tick."""

    def render(self, snapshot: DashboardSnapshot) -> None:
        logger.info(format_summary(snapshot))
