"""Parse-with-default helpers for loosely typed telemetry payloads.

The data source sends numbers as numbers, as strings, or not at all. Each
helper takes the raw value and a documented fallback and never lets ``None``,
NaN or infinity reach the models:

============================  =========================  ==========
Payload field                 Model field                Fallback
============================  =========================  ==========
``voltage``                   ``voltage``                0.0
``current``                   ``current``                0.0
``temperature``               ``temperature``            0.0
``battery``                   ``battery_percent``        0.0
``remaining_time``            ``remaining_time_seconds`` 0
``temp_limit``                ``temperature_limit``      45.0
``fan_status``                ``fan_on``                 "OFF"
============================  =========================  ==========
"""

from __future__ import annotations

import math
from typing import Any, Final

DEFAULT_TEMPERATURE_LIMIT: Final = 45.0
FAN_ON: Final = "ON"
FAN_OFF: Final = "OFF"


def parse_float(value: Any, default: float = 0.0) -> float:
    """Coerce a payload value to a finite float.

    Args:
        value: Raw value (number, numeric string, None, ...)
        default: Value returned when coercion is impossible

    Returns:
        The parsed float, or ``default``
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(result):
        return default
    return result


def parse_int(value: Any, default: int = 0) -> int:
    """Coerce a payload value to an int, truncating any fractional part."""
    result = parse_float(value, float("nan"))
    if math.isnan(result):
        return default
    return int(result)


def parse_fan_status(value: Any, default: str = FAN_OFF) -> str:
    """Normalize a fan status to ``"ON"`` or ``"OFF"``.

    Booleans and 1/0 are accepted as well as the "ON"/"OFF" strings.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return FAN_ON if value else FAN_OFF
    if isinstance(value, (int, float)):
        return FAN_ON if value else FAN_OFF
    text = str(value).strip().upper()
    if text in {FAN_ON, "1", "TRUE"}:
        return FAN_ON
    if text in {FAN_OFF, "0", "FALSE"}:
        return FAN_OFF
    return default


def parse_bool(value: Any) -> bool | None:
    """Coerce an optional flag such as ``esp_connected``.

    Returns:
        True/False, or None when the flag is absent or unrecognised
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"true", "1", "yes", "on"}:
        return True
    if text in {"false", "0", "no", "off"}:
        return False
    return None
