"""Battery monitor dashboard core: liveness tracking, trend buffer and polling."""

__version__ = "0.1.0"
