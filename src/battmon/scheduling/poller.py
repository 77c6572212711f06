"""Periodic, cancellable fetch loop for the latest telemetry."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Final

from battmon.monitor.session import MonitorSession
from battmon.telemetry.errors import (
    ApplicationError,
    ParseError,
    RequestTimeoutError,
    TelemetryAPIError,
)
from battmon.telemetry.models import LatestReading
from battmon.telemetry.source import TelemetrySource
from battmon.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)


class CycleOutcome(Enum):
    """What a single fetch-and-apply cycle did to the session."""

    APPLIED = "applied"
    NO_DATA = "no_data"
    FAILED = "failed"
    DISCARDED = "discarded"  # stale or cancelled, session untouched


class CancellationToken:
    """Flag checked before a completed fetch may touch the session."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class PollingScheduler:
    """Fetches the latest reading at a fixed interval until stopped.

    Each cycle runs as its own task, so a slow fetch never delays the next
    tick. Cycles are numbered; a completion is applied only when its number
    is higher than that of every completion applied before it, and never
    after :meth:`stop` cancelled it. Failures are reported and polling
    carries on at the same interval, without backoff.
    """

    def __init__(
        self,
        session: MonitorSession,
        source: TelemetrySource,
        interval_ms: int = 2000,
        fetch_timeout_s: float = 10.0,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        """Initialize the scheduler.

        Args:
            session: Session receiving liveness, samples and notices
            source: Where readings are fetched from
            interval_ms: Delay between cycle starts
            fetch_timeout_s: Hard bound for one fetch
            clock: Source of "now" for liveness timestamps
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.session = session
        self.source = source
        self.fetch_timeout_s = fetch_timeout_s
        self._interval_ms = interval_ms
        self._clock = clock

        self._sequence = itertools.count(1)
        self._last_applied = 0
        self._tokens: set[CancellationToken] = set()
        self._cycles: set[asyncio.Task[CycleOutcome]] = set()
        self._loop_task: asyncio.Task[None] | None = None

    # ---- interval ----
    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @interval_ms.setter
    def interval_ms(self, value: int) -> None:
        """Change the interval; the wait already in progress is not shortened."""
        if value <= 0:
            raise ValueError(f"interval_ms must be positive, got {value}")
        self._interval_ms = value
        self.session.notices.info(f"Refresh rate: {value / 1000:g} seconds")

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    # ---- lifecycle ----
    def start(self, interval_ms: int | None = None) -> asyncio.Task[None]:
        """Run one cycle now, then one every ``interval_ms``.

        Must be called from within a running event loop.

        Returns:
            The task driving the loop

        Raises:
            RuntimeError: If the scheduler is already running
        """
        if self.running:
            raise RuntimeError("Polling scheduler is already running")
        if interval_ms is not None:
            if interval_ms <= 0:
                raise ValueError(f"interval_ms must be positive, got {interval_ms}")
            self._interval_ms = interval_ms

        logger.info("Polling every %d ms", self._interval_ms)
        self._loop_task = asyncio.get_running_loop().create_task(self._run())
        return self._loop_task

    def stop(self) -> None:
        """Stop the loop and cancel every cycle still in flight."""
        for token in self._tokens:
            token.cancel()
        for task in list(self._cycles):
            task.cancel()
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
        logger.info("Polling stopped")

    async def drain(self) -> None:
        """Wait for the cycles currently in flight to settle."""
        if self._cycles:
            await asyncio.gather(*list(self._cycles), return_exceptions=True)

    async def _run(self) -> None:
        while True:
            self._spawn_cycle()
            await asyncio.sleep(self._interval_ms / 1000)

    def _spawn_cycle(self) -> None:
        task = asyncio.get_running_loop().create_task(self.run_cycle())
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)

    # ---- one cycle ----
    async def run_cycle(self) -> CycleOutcome:
        """Fetch the latest reading once and apply it to the session."""
        sequence = next(self._sequence)
        token = CancellationToken()
        self._tokens.add(token)

        reading: LatestReading | None = None
        error: TelemetryAPIError | None = None
        try:
            reading = await asyncio.wait_for(
                self.source.fetch_latest(), timeout=self.fetch_timeout_s
            )
        except asyncio.TimeoutError:
            error = RequestTimeoutError(f"Request timeout after {self.fetch_timeout_s:g}s")
        except TelemetryAPIError as err:
            error = err
        except Exception as exc:
            logger.exception("Unexpected error in cycle %d", sequence)
            error = ParseError(f"Unexpected error: {exc}", exc)
        finally:
            self._tokens.discard(token)

        if token.cancelled:
            logger.debug("Cycle %d cancelled, result dropped", sequence)
            return CycleOutcome.DISCARDED
        if sequence <= self._last_applied:
            logger.debug(
                "Cycle %d completed after cycle %d, result dropped",
                sequence,
                self._last_applied,
            )
            return CycleOutcome.DISCARDED
        self._last_applied = sequence

        if error is not None:
            return self._apply_failure(error)
        assert reading is not None
        return self._apply_reading(reading)

    def _apply_failure(self, error: TelemetryAPIError) -> CycleOutcome:
        logger.error("Error fetching latest data: %s", error)
        self.session.apply_failure()
        if isinstance(error, ApplicationError):
            self.session.notices.error(error.message)
        else:
            self.session.notices.error(f"Failed to fetch data: {error.message}")
        return CycleOutcome.FAILED

    def _apply_reading(self, reading: LatestReading) -> CycleOutcome:
        if reading.sample is None:
            self.session.apply_no_data()
            self.session.notices.info("No data available from server")
            return CycleOutcome.NO_DATA

        self.session.apply_sample(
            reading.sample,
            self._clock(),
            device_connected=reading.device_connected,
            reported_age_s=reading.seconds_since_last,
        )
        logger.debug("Applied cycle %d: %s", self._last_applied, reading.sample)
        return CycleOutcome.APPLIED
