"""Shared enumerations used across battmon."""

from battmon.common.enums import ConnectionStatus, NoticeLevel, ThermalState

__all__ = ["ConnectionStatus", "NoticeLevel", "ThermalState"]
