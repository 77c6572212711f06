"""Page-indexed view over the server-paginated history log."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Final

from battmon.monitor.session import MonitorSession
from battmon.telemetry.errors import RequestTimeoutError, TelemetryAPIError
from battmon.telemetry.models import HistoryPage
from battmon.telemetry.source import TelemetrySource

logger: Final = logging.getLogger(__name__)


class HistoryPager:
    """Loads history pages on demand and keeps the one on display.

    A failed load posts an error notice and leaves the displayed page as it
    was. When loads overlap, only the most recently requested one is applied.
    """

    def __init__(
        self,
        source: TelemetrySource,
        session: MonitorSession,
        page_size: int,
        timeout_s: float = 10.0,
    ) -> None:
        """Initialize the pager.

        Args:
            source: Where pages are fetched from
            session: Session holding the displayed page and the notice board
            page_size: Rows requested per page
            timeout_s: Hard bound for one page fetch
        """
        self.source = source
        self.session = session
        self.page_size = page_size
        self.timeout_s = timeout_s
        self._requests = itertools.count(1)
        self._latest_request = 0

    @property
    def current(self) -> HistoryPage:
        """The page on display."""
        return self.session.history

    @property
    def has_next(self) -> bool:
        """False when the "next" control should be disabled."""
        return self.current.has_next

    @property
    def has_previous(self) -> bool:
        """False when the "previous" control should be disabled."""
        return self.current.has_previous

    async def load_page(self, page: int) -> bool:
        """Fetch ``page`` and, on success, replace the displayed page.

        Args:
            page: 1-based page number

        Returns:
            True if the page was applied

        Raises:
            ValueError: If page is below 1
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        request = next(self._requests)
        self._latest_request = request
        logger.info("Loading history page %d...", page)

        try:
            loaded = await asyncio.wait_for(
                self.source.fetch_history(page, self.page_size), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            error: TelemetryAPIError = RequestTimeoutError(
                f"Request timeout after {self.timeout_s:g}s"
            )
            self._report(request, error)
            return False
        except TelemetryAPIError as err:
            self._report(request, err)
            return False

        if request != self._latest_request:
            logger.debug("Discarding superseded history page %d", page)
            return False

        self.session.history = loaded
        return True

    async def next(self) -> bool:
        """Load the following page; no-op on the last page."""
        if not self.has_next:
            return False
        return await self.load_page(self.current.page + 1)

    async def previous(self) -> bool:
        """Load the preceding page; no-op on the first page.

        A page number past the last page steps back to the last page.
        """
        if not self.has_previous:
            return False
        return await self.load_page(min(self.current.page - 1, self.current.total_pages))

    def _report(self, request: int, error: TelemetryAPIError) -> None:
        if request != self._latest_request:
            logger.debug("Ignoring failure of superseded history request: %s", error)
            return
        logger.error("Error loading history: %s", error)
        self.session.notices.error(f"Failed to load history data: {error.message}")
