"""Application settings management.

This package provides:
- UserSettings: User-configurable settings loaded from config.yaml
- ApplicationSettings: Internal application settings and defaults
"""

from battmon.settings.application import (
    AppPaths,
    ApplicationSettings,
    GaugeScale,
    PollingSettings,
    TickSettings,
)
from battmon.settings.user import UserSettings

__all__ = [
    "AppPaths",
    "ApplicationSettings",
    "GaugeScale",
    "PollingSettings",
    "TickSettings",
    "UserSettings",
]
