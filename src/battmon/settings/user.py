"""User-configurable settings loaded from config.yaml."""

from __future__ import annotations

import os
import re
import urllib.parse
from pathlib import Path
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load environment variables from .env file(s)
load_dotenv()


def _interpolate_env(content: str) -> str:
    return re.sub(r"\$\{(\w+)\}", lambda m: os.getenv(m.group(1), ""), content)


class UserSettings(BaseModel):
    """User settings for the data source, polling cadence and liveness rules.

    Defaults match the browser dashboard this tool replaces:
    a 2 s poll, a 15 s device timeout and a 30 point trend window.
    """

    # Default search paths for configuration
    DEFAULT_CONFIG_PATHS: ClassVar[list[Path]] = [
        Path("config.yaml"),
        Path("~/.config/battmon/config.yaml").expanduser(),
        Path("/etc/battmon/config.yaml"),
    ]

    # Data source
    api_endpoint: str = Field(..., description="HTTP(S) endpoint accepting ?action=...")

    # Polling
    refresh_interval_ms: int = Field(2000, gt=0, description="Poll interval (milliseconds)")
    fetch_timeout_s: float = Field(10.0, gt=0, description="Hard bound for data fetches")
    probe_timeout_s: float = Field(5.0, gt=0, description="Hard bound for the connectivity probe")
    tick_interval_s: float = Field(1.0, gt=0, description="Liveness/clock tick period")

    # Liveness
    device_timeout_ms: int = Field(
        15000,
        gt=0,
        description="Device counts as reachable while the last success is at most this old",
    )

    # Trend and history views
    series_capacity: int = Field(30, ge=1, description="Points kept in the trend window")
    history_page_size: int = Field(500000, ge=1, description="Rows requested per history page")

    # Time formatting
    label_format: str = Field("%H:%M:%S", description="Trend chart x-axis label format")
    timezone: str | None = Field(
        None, description="Timezone for labels; system local time if unset"
    )

    # ---- validators ----
    @field_validator("api_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        parsed = urllib.parse.urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"api_endpoint must be an http(s) URL, got {v!r}")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    # ---- convenience methods ----
    def get_timezone(self) -> ZoneInfo | None:
        """Get configured timezone as ZoneInfo object.

        Returns:
            ZoneInfo for the configured timezone, or None for local time
        """
        return ZoneInfo(self.timezone) if self.timezone else None

    @property
    def refresh_interval_s(self) -> float:
        """Poll interval in seconds."""
        return self.refresh_interval_ms / 1000

    @classmethod
    def load(cls, path: Path | None = None) -> UserSettings:
        """Load configuration from a YAML file.

        Args:
            path: Path to config file (optional, searches default locations if None)

        Returns:
            Validated UserSettings object

        Raises:
            FileNotFoundError: If no config file is found
            RuntimeError: If the config file cannot be parsed or is invalid
        """
        # Try to find config file
        if path is None:
            # Check environment variable first
            env_path = os.environ.get("BATTMON_CONFIG")
            if env_path:
                path = Path(env_path)
                if not path.exists():
                    raise FileNotFoundError(f"Config file from BATTMON_CONFIG not found: {path}")
            else:
                # Try default paths
                for default_path in cls.DEFAULT_CONFIG_PATHS:
                    if default_path.exists():
                        path = default_path
                        break
                else:
                    raise FileNotFoundError(
                        "No configuration file found. Create config.yaml or set BATTMON_CONFIG."
                    )

        # Load and parse config
        import yaml  # local import to avoid hard dep for callers

        try:
            raw = _interpolate_env(path.read_text())
            data = yaml.safe_load(raw)
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(f"Unable to read config YAML: {exc}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise RuntimeError(f"Invalid configuration:\n{err}") from err
