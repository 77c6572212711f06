"""Connection and device liveness tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Final

from battmon.common.enums import ConnectionStatus
from battmon.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)


@dataclass(frozen=True)
class LivenessState:
    """Read-only snapshot of the connection health.

    ``seconds_since_last_success`` is 0 while nothing has succeeded yet; in
    that case ``device_reachable`` is always False.
    """

    server_reachable: bool = False
    device_reachable: bool = False
    last_success_at: datetime | None = None
    seconds_since_last_success: int = 0

    @property
    def status(self) -> ConnectionStatus:
        """Header status derived from the two reachability flags."""
        if self.server_reachable and self.device_reachable:
            return ConnectionStatus.ONLINE
        if self.server_reachable:
            return ConnectionStatus.DEVICE_OFFLINE
        return ConnectionStatus.OFFLINE


class LivenessTracker:
    """Decides whether the server and the device are reachable.

    The server is reachable after a successful fetch and unreachable after a
    failed one. The device is reachable only while the server is and the last
    success is no older than the timeout; :meth:`tick` recomputes that from
    the clock. A ``device_connected`` flag reported by the server overrides
    the time-based answer until the next tick.

    No method raises: absence of data is a state, not an error.
    """

    def __init__(self) -> None:
        self._server_reachable = False
        self._device_reachable = False
        self._last_success_at: datetime | None = None
        self._seconds_since = 0

    @property
    def state(self) -> LivenessState:
        """Current snapshot."""
        return LivenessState(
            server_reachable=self._server_reachable,
            device_reachable=self._device_reachable,
            last_success_at=self._last_success_at,
            seconds_since_last_success=self._seconds_since,
        )

    @property
    def status(self) -> ConnectionStatus:
        return self.state.status

    def record_success(
        self,
        now: datetime,
        device_connected: bool | None = None,
        reported_age_s: int | None = None,
    ) -> None:
        """Register a successful fetch carrying device data.

        Args:
            now: Time the response was applied
            device_connected: Explicit device flag from the payload, if any
            reported_age_s: Server-side age of the data in seconds, if any
        """
        self._last_success_at = now
        self._server_reachable = True
        self._seconds_since = reported_age_s if reported_age_s else 0
        if device_connected is None:
            self._device_reachable = True
        else:
            self._device_reachable = device_connected
        logger.debug("Liveness: success at %s (device=%s)", now, self._device_reachable)

    def record_no_data(self) -> None:
        """Register a "success" answer that carried no device data.

        The server stays reachable; the device is marked unreachable and the
        last-success timestamp is left as it was.
        """
        self._server_reachable = True
        self._device_reachable = False
        logger.debug("Liveness: server reachable, no device data")

    def record_failure(self) -> None:
        """Register a failed fetch; the device becomes unreachable with the server."""
        self._server_reachable = False
        self._device_reachable = False
        logger.debug("Liveness: failure recorded")

    def tick(self, now: datetime, timeout: timedelta) -> LivenessState:
        """Recompute elapsed time and device reachability.

        Args:
            now: Current time
            timeout: Maximum age of the last success for the device to count
                as reachable (inclusive)

        Returns:
            The recomputed snapshot
        """
        if self._last_success_at is None:
            self._seconds_since = 0
            self._device_reachable = False
        else:
            elapsed = now - self._last_success_at
            self._seconds_since = TimeUtils.whole_seconds_between(self._last_success_at, now)
            self._device_reachable = self._server_reachable and elapsed <= timeout
        return self.state
