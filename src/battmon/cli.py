"""Battery monitor CLI application.

This module provides the command-line interface for the battery monitor,
including the live dashboard loop, connectivity probing, history browsing,
CSV export and configuration utilities.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Final

import typer
import yaml
from pydantic import ValidationError

from battmon.controller import BatteryMonitor
from battmon.display.console import format_history, format_summary
from battmon.settings.user import UserSettings
from battmon.telemetry.api import TelemetryAPI

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Battery monitor dashboard CLI", add_completion=False)
config_app = typer.Typer(help="Config helpers")
app.add_typer(config_app, name="config")

logger: Final = logging.getLogger(__name__)  # Will be "battmon.cli"

# Shared options
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    exists=True,
    dir_okay=False,
    help="config.yaml (defaults to BATTMON_CONFIG or the standard locations)",
)
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")
DST_ARGUMENT = typer.Argument(..., help="Output config.yaml")
ONCE_OPTION = typer.Option(False, "--once", "-1", help="Run one fetch cycle then exit")
INTERVAL_OPTION = typer.Option(None, "--interval-ms", min=1, help="Override the poll interval")
PAGE_OPTION = typer.Option(1, "--page", "-p", min=1, help="History page to load")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", dir_okay=False, help="CSV destination")


def _build_monitor(config: Path | None, debug: bool) -> BatteryMonitor:
    try:
        return BatteryMonitor(config, debug=debug)
    except (FileNotFoundError, RuntimeError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def run(
    config: Path | None = CONFIG_OPTION,
    interval_ms: int | None = INTERVAL_OPTION,
    once: bool = ONCE_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Run the live dashboard until interrupted."""
    monitor = _build_monitor(config, debug)
    if interval_ms is not None:
        monitor.scheduler.interval_ms = interval_ms

    if once:
        monitor.ticker.view = None
        _, snapshot = asyncio.run(monitor.run_once())
        typer.echo(format_summary(snapshot))
        return

    try:
        asyncio.run(monitor.run())
    except KeyboardInterrupt:
        typer.echo("Stopped")


@app.command()
def probe(config: Path | None = CONFIG_OPTION, debug: bool = DEBUG_OPTION) -> None:
    """Check that the data source answers."""
    monitor = _build_monitor(config, debug)
    result = asyncio.run(monitor.probe())
    if not result.success:
        typer.secho(result.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(result.message, fg=typer.colors.GREEN)


@app.command()
def history(
    config: Path | None = CONFIG_OPTION,
    page: int = PAGE_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Print one page of the history log."""
    monitor = _build_monitor(config, debug)
    if not asyncio.run(monitor.pager.load_page(page)):
        notice = monitor.session.notices.latest
        message = notice.message if notice else "Failed to load history"
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(format_history(monitor.pager.current))


@app.command()
def export(
    config: Path | None = CONFIG_OPTION,
    page: int = PAGE_OPTION,
    output: Path | None = OUTPUT_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Export one page of the history log as CSV."""
    monitor = _build_monitor(config, debug)
    asyncio.run(monitor.pager.load_page(page))
    written = monitor.export_history(output)
    if written is None:
        notice = monitor.session.notices.latest
        message = notice.message if notice else "No data to export"
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"Exported to {written}", fg=typer.colors.GREEN)


# ───────────────────────── config sub-commands ───────────────────────────────
@config_app.command("validate")
def validate_config(file: Path):
    """Validate a YAML config file against the schema."""
    try:
        UserSettings.load(file)
        typer.echo("✅ Config valid")
    except (FileNotFoundError, RuntimeError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@config_app.command("wizard")
def wizard(dst: Path = DST_ARGUMENT):
    """Interactive prompt to create a config file."""
    typer.echo("Interactive config builder - press Enter for defaults.")

    while True:
        data: dict[str, Any] = {
            "api_endpoint": typer.prompt("API endpoint URL"),
            "refresh_interval_ms": typer.prompt("Refresh interval (ms)", default=2000, type=int),
            "device_timeout_ms": typer.prompt("Device timeout (ms)", default=15000, type=int),
            "series_capacity": typer.prompt("Trend chart points", default=30, type=int),
        }
        try:
            cfg = UserSettings(**data)
            break  # valid → exit loop
        except ValidationError as err:
            typer.secho("\nConfig error(s):", fg=typer.colors.RED, err=True)
            for e in err.errors():
                typer.secho(f"  • {e['loc'][0]} - {e['msg']}", fg=typer.colors.RED, err=True)
            typer.echo("Please re-enter the values.\n")

    if typer.confirm("Test the connection now?", default=False):
        result = TelemetryAPI(cfg).test_connection()
        color = typer.colors.GREEN if result.success else typer.colors.YELLOW
        typer.secho(result.message, fg=color)

    dst.write_text(
        yaml.safe_dump(cfg.model_dump(exclude_none=True), sort_keys=False), encoding="utf-8"
    )
    typer.secho(f"Config written to {dst}", fg=typer.colors.GREEN)


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)
