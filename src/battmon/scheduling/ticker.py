"""One-second clock driving liveness recomputation and rendering."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Final, Protocol, runtime_checkable

from battmon.monitor.session import DashboardSnapshot, MonitorSession
from battmon.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)


@runtime_checkable
class DashboardView(Protocol):
    """Presentation layer reading a snapshot on every tick."""

    def render(self, snapshot: DashboardSnapshot) -> None:
        """Render one snapshot."""
        ...


class LivenessTicker:
    """Recomputes liveness every ``interval_s`` and hands a snapshot to the view."""

    def __init__(
        self,
        session: MonitorSession,
        timeout: timedelta,
        view: DashboardView | None = None,
        interval_s: float = 1.0,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        self.session = session
        self.timeout = timeout
        self.view = view
        self.interval_s = interval_s
        self._clock = clock

    def tick(self) -> DashboardSnapshot:
        """Run one tick: recompute liveness, then render."""
        now = self._clock()
        self.session.tracker.tick(now, self.timeout)
        snapshot = self.session.snapshot(now)
        if self.view is not None:
            self.view.render(snapshot)
        return snapshot

    async def run(self) -> None:
        """Tick until cancelled."""
        while True:
            self.tick()
            await asyncio.sleep(self.interval_s)
