# src/battmon/utils/time.py
"""Time and date handling utilities."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any


class TimeUtils:
    """Time-related utility functions.

    Centralized utilities for working with dates and times:
    - Current time retrieval with proper timezone handling
    - Elapsed-time arithmetic used by the liveness tracker
    - Parsing of the loosely typed timestamps sent by the data source
    """

    @staticmethod
    def now_localized() -> datetime:
        """Get current datetime with local timezone.

        Returns:
            Current datetime with local timezone
        """
        return datetime.now(UTC).astimezone()

    @staticmethod
    def format_datetime(dt: datetime, format_string: str) -> str:
        """Format datetime with specified format string.

        Args:
            dt: Datetime to format
            format_string: strftime format string

        Returns:
            Formatted datetime string
        """
        return dt.strftime(format_string)

    @staticmethod
    def epoch_millis(dt: datetime | None = None) -> int:
        """Convert datetime to epoch milliseconds (now if omitted).

        Args:
            dt: Datetime object (assumes UTC timezone if not specified)

        Returns:
            Epoch milliseconds as integer
        """
        if dt is None:
            dt = datetime.now(UTC)
        elif dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp() * 1000)

    @staticmethod
    def whole_seconds_between(start: datetime, end: datetime) -> int:
        """Whole seconds elapsed from start to end, floored.

        Args:
            start: Earlier datetime
            end: Later datetime

        Returns:
            floor((end - start) / 1s); negative if end precedes start
        """
        return (end - start) // timedelta(seconds=1)

    @staticmethod
    def parse_timestamp(value: Any) -> datetime | None:
        """Parse an ISO-8601 string or an epoch value into an aware datetime.

        Epoch values above 10^11 are taken as milliseconds, which is what
        JavaScript-based backends emit.

        Args:
            value: Raw timestamp from an API payload

        Returns:
            Timezone-aware datetime, or None if the value cannot be parsed
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=UTC)
        if isinstance(value, (int, float)):
            seconds = value / 1000 if abs(value) > 1e11 else value
            try:
                return datetime.fromtimestamp(seconds, tz=UTC)
            except (OverflowError, OSError, ValueError):
                return None
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
