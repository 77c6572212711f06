"""Console presentation of dashboard snapshots."""

from .console import ConsoleView, format_history, format_summary

__all__ = ["ConsoleView", "format_history", "format_summary"]
