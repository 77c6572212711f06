"""Transient user-visible notices."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Final

from battmon.common.enums import NoticeLevel
from battmon.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)

_LOG_LEVELS: Final = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    """A message shown to the user for a short time."""

    level: NoticeLevel
    message: str
    created_at: datetime = field(default_factory=TimeUtils.now_localized)


class NoticeBoard:
    """Bounded backlog of notices.

    Notices are visible for ``ttl`` after they are posted; the backlog keeps
    the most recent ``capacity`` of them regardless of age. Every notice is
    also written to the log.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=3),
        capacity: int = 50,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._notices: deque[Notice] = deque(maxlen=capacity)

    def post(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level, message, self._clock())
        self._notices.append(notice)
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value.upper(), message)
        return notice

    def info(self, message: str) -> Notice:
        return self.post(NoticeLevel.INFO, message)

    def success(self, message: str) -> Notice:
        return self.post(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> Notice:
        return self.post(NoticeLevel.ERROR, message)

    def active(self, now: datetime | None = None) -> list[Notice]:
        """Notices still within their display time, oldest first."""
        now = now or self._clock()
        return [n for n in self._notices if now - n.created_at <= self.ttl]

    def recent(self) -> list[Notice]:
        """Whole backlog, oldest first."""
        return list(self._notices)

    @property
    def latest(self) -> Notice | None:
        return self._notices[-1] if self._notices else None
