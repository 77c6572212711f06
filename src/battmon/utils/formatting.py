"""Text and number formatting utilities."""

from __future__ import annotations

from datetime import timedelta
from typing import Final

# Shown in place of a value when no current sample is available
PLACEHOLDER: Final = "--"


def format_measurement(value: float | None, unit: str, digits: int = 1) -> str:
    """Format a measurement with its unit, or the placeholder if missing.

    Args:
        value: Measured value
        unit: Unit suffix (e.g. "V", "°C")
        digits: Decimal places

    Returns:
        Formatted string such as "24.5 V"
    """
    if value is None:
        return PLACEHOLDER
    return f"{value:.{digits}f} {unit}"


def format_duration(delta: timedelta) -> str:
    """Format a duration as HH:MM:SS.

    Hours are not wrapped at 24.
    """
    total = max(int(delta.total_seconds()), 0)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
