"""Exception classes for telemetry data-source interactions.

This module defines a hierarchy of exception classes for the failure kinds
the polling loop has to survive:

- transport errors (no response, or the request exceeded its time bound)
- protocol errors (non-success HTTP status)
- application errors (a "success" HTTP status carrying an error payload, or
  a body that cannot be parsed)
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TelemetryAPIError(Exception):
    """Error during a data-source request or response parsing.

    Includes the HTTP status (0 when there was no response), a human-readable
    message and, when available, the decoded response body.
    """

    def __init__(
        self, code: int, message: str, response: Optional[Dict[str, Any]] = None
    ) -> None:
        """Initialize the exception.

        Args:
            code: HTTP status code or 0 for non-HTTP failures
            message: Human-readable error message
            response: Optional raw API response for debugging
        """
        super().__init__(f"[{code}] {message}")
        self.code: int = code
        self.message: str = message
        self.response: Optional[Dict[str, Any]] = response

    @property
    def is_client_error(self) -> bool:
        """Check if this is a client-side error (4xx).

        Returns:
            True for 400-499 status codes
        """
        return 400 <= self.code < 500

    @property
    def is_server_error(self) -> bool:
        """Check if this is a server-side error (5xx).

        Returns:
            True for 500-599 status codes
        """
        return self.code >= 500

    @classmethod
    def from_response(
        cls, response: Dict[str, Any], status_code: int = 0
    ) -> TelemetryAPIError:
        """Create an error from an HTTP error response.

        Args:
            response: Decoded response body (may be empty)
            status_code: HTTP status code

        Returns:
            Appropriate TelemetryAPIError subclass
        """
        if 400 <= status_code < 500:
            if status_code == 404:
                return NotFoundError(
                    status_code, response.get("message", "Endpoint not found")
                )
            elif status_code == 429:
                return RateLimitError(
                    status_code, response.get("message", "Rate limit exceeded")
                )
            return ClientError(
                status_code, response.get("message", "Client error"), response
            )
        elif status_code >= 500:
            return ServerError(
                status_code, response.get("message", "Server error"), response
            )

        return cls(status_code, response.get("message", "Unknown error"), response)


class NetworkError(TelemetryAPIError):
    """Raised when a network issue prevents API communication."""

    def __init__(
        self, message: str, original_error: Optional[Exception] = None
    ) -> None:
        """Initialize with network error details.

        Args:
            message: Description of the network error
            original_error: The original exception that was caught
        """
        super().__init__(0, message)
        self.original_error = original_error


class RequestTimeoutError(NetworkError):
    """Raised when a request exceeds its time bound."""

    pass


class ClientError(TelemetryAPIError):
    """Raised for general 4xx client errors."""

    pass


class NotFoundError(ClientError):
    """Raised when the endpoint or action does not exist."""

    pass


class RateLimitError(ClientError):
    """Raised when rate limits are exceeded."""

    pass


class ServerError(TelemetryAPIError):
    """Raised for 5xx server errors."""

    pass


class ApplicationError(TelemetryAPIError):
    """Raised when the server answers but reports a non-"success" status."""

    def __init__(self, message: str, response: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(0, message, response)


class ParseError(TelemetryAPIError):
    """Raised when API response parsing fails."""

    def __init__(
        self, message: str, original_error: Optional[Exception] = None
    ) -> None:
        """Initialize with parsing error details.

        Args:
            message: Description of the parsing error
            original_error: The original exception that was caught
        """
        super().__init__(0, message)
        self.original_error = original_error
