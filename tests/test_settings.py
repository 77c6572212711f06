from datetime import date, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from battmon.settings import AppPaths, ApplicationSettings, GaugeScale, UserSettings

CONFIG_YAML = """\
api_endpoint: "https://script.example.test/${BATTMON_DEPLOYMENT}/exec"
refresh_interval_ms: 5000
device_timeout_ms: 20000
series_capacity: 60
timezone: "UTC"
"""


def test_defaults(config: UserSettings) -> None:
    assert config.refresh_interval_ms == 2000
    assert config.refresh_interval_s == 2.0
    assert config.fetch_timeout_s == 10.0
    assert config.probe_timeout_s == 5.0
    assert config.device_timeout_ms == 15000
    assert config.series_capacity == 30
    assert config.history_page_size == 500000
    assert config.get_timezone() is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"api_endpoint": "ftp://example.test"},
        {"api_endpoint": "not a url"},
        {"refresh_interval_ms": 0},
        {"series_capacity": 0},
        {"timezone": "Mars/Olympus"},
    ],
)
def test_invalid_settings(overrides: dict) -> None:
    data = {"api_endpoint": "https://example.test/exec", **overrides}
    with pytest.raises(ValidationError):
        UserSettings(**data)


def test_load_interpolates_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATTMON_DEPLOYMENT", "abc123")
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(CONFIG_YAML)

    cfg = UserSettings.load(cfg_file)
    assert cfg.api_endpoint == "https://script.example.test/abc123/exec"
    assert cfg.refresh_interval_ms == 5000
    assert cfg.series_capacity == 60
    assert cfg.get_timezone() == ZoneInfo("UTC")


def test_load_from_env_var(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_file = tmp_path / "custom.yaml"
    cfg_file.write_text('api_endpoint: "http://localhost:8000/exec"\n')
    monkeypatch.setenv("BATTMON_CONFIG", str(cfg_file))
    assert UserSettings.load().api_endpoint == "http://localhost:8000/exec"

    monkeypatch.setenv("BATTMON_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        UserSettings.load()


def test_load_invalid_config_raises_runtime_error(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("refresh_interval_ms: 100\n")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        UserSettings.load(cfg_file)


def test_application_settings_derive_from_user(config: UserSettings, tmp_path: Path) -> None:
    app = ApplicationSettings(config, paths=AppPaths.from_base_dir(tmp_path))
    assert app.polling.interval_ms == 2000
    assert app.polling.probe_timeout_s == 5.0
    assert app.ticks.device_timeout == timedelta(seconds=15)
    assert app.notice_ttl == timedelta(seconds=3)
    assert app.paths.export_file(date(2025, 5, 3)) == (
        tmp_path / "exports" / "battery-data-2025-05-03.csv"
    )


@pytest.mark.parametrize(
    "value, expected",
    [(21.0, 0.0), (25.2, 50.0), (29.4, 100.0), (10.0, 0.0), (40.0, 100.0)],
)
def test_gauge_scale_clamps(value: float, expected: float) -> None:
    assert GaugeScale(21.0, 29.4).percent(value) == pytest.approx(expected)
