"""Telemetry API client for the battery monitor data source."""

from __future__ import annotations

import logging
from typing import Any, Final

import requests
from pydantic import ValidationError
from typing_extensions import TypedDict

from battmon.settings import UserSettings
from battmon.telemetry.coerce import parse_bool, parse_int
from battmon.telemetry.errors import (
    ApplicationError,
    NetworkError,
    ParseError,
    RequestTimeoutError,
    TelemetryAPIError,
)
from battmon.telemetry.models import HistoryPage, LatestReading, ProbeResult, TelemetrySample
from battmon.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)

SUCCESS_STATUS: Final = "success"

# Human-readable explanations for common HTTP errors
HTTP_ERROR_MAP: Final = {
    400: "Bad request - check the action parameters",
    401: "Endpoint requires authorization",
    403: "Access to the endpoint is forbidden",
    404: "Endpoint not found - check api_endpoint",
    429: "Rate limit exceeded",
    500: "Data source internal error",
    502: "Bad gateway at the data source",
    503: "Data source unavailable",
    504: "Gateway timeout",
}


class LatestPayload(TypedDict, total=False):
    """Response structure for ``action=getLatest``."""

    status: str
    message: str
    data: dict[str, Any] | None
    esp_connected: bool
    time_since_last: float


class TelemetryAPI:
    """Synchronous client for the single-endpoint telemetry API.

    Every call goes to ``api_endpoint`` with an ``action`` query parameter and
    a ``_`` cache buster. Transport, HTTP and payload failures are raised as
    :class:`TelemetryAPIError` subclasses; a "success" answer without data is
    not an error and comes back as a :class:`LatestReading` with no sample.
    """

    def __init__(self, config: UserSettings, session: requests.Session | None = None) -> None:
        """Initialize the telemetry API client.

        Args:
            config: User settings with the endpoint and timeouts
            session: Optional requests session; module-level requests is used if None
        """
        self.config = config
        self.session = session

    def _get(self, params: dict[str, Any], timeout: float) -> requests.Response:
        if self.session is not None:
            return self.session.get(self.config.api_endpoint, params=params, timeout=timeout)
        return requests.get(self.config.api_endpoint, params=params, timeout=timeout)

    def request(
        self, action: str, timeout: float | None = None, **params: Any
    ) -> dict[str, Any]:
        """Perform one GET against the endpoint and decode the JSON body.

        Args:
            action: Value of the ``action`` query parameter
            timeout: Request timeout in seconds (defaults to fetch_timeout_s)
            **params: Extra query parameters

        Returns:
            Decoded JSON object

        Raises:
            RequestTimeoutError: When the request exceeds its time bound
            NetworkError: When network connectivity issues occur
            TelemetryAPIError: For non-200 HTTP statuses
            ParseError: When the body is not a JSON object
        """
        query: dict[str, Any] = {"action": action, **params, "_": TimeUtils.epoch_millis()}
        bound = self.config.fetch_timeout_s if timeout is None else timeout
        logger.debug("Fetching %s with %s", self.config.api_endpoint, query)

        try:
            resp = self._get(query, bound)
        except requests.Timeout as exc:
            logger.warning("Telemetry API timeout after %.1fs (%s)", bound, action)
            raise RequestTimeoutError(f"Request timeout after {bound:g}s", exc) from exc
        except requests.RequestException as exc:
            logger.warning("Telemetry API network error: %s", exc)
            raise NetworkError(f"Network error: {exc}", exc) from exc

        if resp.status_code != 200:
            try:
                body = resp.json()
                if not isinstance(body, dict):
                    body = {}
            except ValueError:
                body = {}
            body.setdefault("message", HTTP_ERROR_MAP.get(resp.status_code, resp.text))
            logger.error("Telemetry API error: %s - %s", resp.status_code, body["message"])
            raise TelemetryAPIError.from_response(body, resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Telemetry API returned invalid JSON: %.200s", resp.text)
            raise ParseError(f"Invalid JSON in response: {exc}", exc) from exc

        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def test_connection(self) -> ProbeResult:
        """Probe the endpoint with ``action=test``.

        Never raises; failures are reported in the result.

        Returns:
            ProbeResult describing the outcome
        """
        try:
            data = self.request("test", timeout=self.config.probe_timeout_s)
        except TelemetryAPIError as exc:
            logger.error("Connection test failed: %s", exc)
            return ProbeResult(False, f"Connection failed: {exc.message}")

        logger.debug("Connection test response: %s", data)
        return ProbeResult(True, "Connection test passed", data)

    def fetch_latest(self) -> LatestReading:
        """Retrieve the most recent device reading.

        Returns:
            LatestReading; its sample is None when the server has no data

        Raises:
            ApplicationError: When the payload status is not "success"
            ParseError: When the payload cannot be turned into a sample
            TelemetryAPIError: For transport and HTTP errors (see request)
        """
        payload: LatestPayload = self.request("getLatest")  # type: ignore[assignment]

        status = payload.get("status")
        if status != SUCCESS_STATUS:
            message = str(payload.get("message") or "Unknown error")
            logger.error("Server returned error: %s", message)
            raise ApplicationError(f"Server error: {message}", dict(payload))

        device_connected = parse_bool(payload.get("esp_connected"))
        raw_age = payload.get("time_since_last")
        seconds_since_last = parse_int(raw_age, 0) if raw_age is not None else None

        raw = payload.get("data")
        if not raw:
            logger.warning("API returned success but data is null")
            return LatestReading(None, device_connected, seconds_since_last)
        if not isinstance(raw, dict):
            raise ParseError(f"Expected data to be an object, got {type(raw).__name__}")

        try:
            sample = TelemetrySample.model_validate(raw)
        except ValidationError as exc:
            raise ParseError(f"Malformed telemetry data: {exc}", exc) from exc

        logger.debug("Telemetry received: %s", sample)
        return LatestReading(sample, device_connected, seconds_since_last)

    def fetch_history(self, page: int = 1, limit: int | None = None) -> HistoryPage:
        """Retrieve one page of the history log.

        Args:
            page: 1-based page number
            limit: Page size (defaults to history_page_size)

        Returns:
            Validated HistoryPage

        Raises:
            ValueError: If page is below 1
            ApplicationError: When the payload status is not "success"
            ParseError: When the payload cannot be turned into a page
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        size = limit or self.config.history_page_size

        payload = self.request("getHistory", page=page, limit=size)
        if payload.get("status") != SUCCESS_STATUS:
            message = str(payload.get("message") or "Unknown error")
            raise ApplicationError(f"Failed to load history: {message}", payload)

        rows = payload.get("data")
        if rows is not None and not isinstance(rows, list):
            raise ParseError(f"Expected history data to be a list, got {type(rows).__name__}")

        try:
            history = HistoryPage.from_payload(payload)
        except ValidationError as exc:
            raise ParseError(f"Malformed history data: {exc}", exc) from exc

        logger.info(
            "History loaded: %d records (page %d/%d)",
            len(history.records),
            history.page,
            history.total_pages,
        )
        return history
