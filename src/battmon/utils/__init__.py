"""Common utility functions and helpers for the battmon package."""

from battmon.utils.formatting import (
    PLACEHOLDER,
    format_duration,
    format_measurement,
)
from battmon.utils.time import TimeUtils

__all__ = [
    "PLACEHOLDER",
    "TimeUtils",
    "format_duration",
    "format_measurement",
]
