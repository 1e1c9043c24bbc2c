"""Error hierarchy for the Koios client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ResponseError


class KoiosError(Exception):
    """Base class for every error raised or captured by the client."""


class InvalidConfigurationError(KoiosError, ValueError):
    """Raised when a configuration value is rejected."""


class ConfigurationImmutableError(KoiosError):
    """Raised when a construction-only setting is changed afterwards."""


class InvalidArgumentError(KoiosError, ValueError):
    """Raised for malformed calls, e.g. several query sets or a missing id."""


class TransportError(KoiosError):
    """Network level failure before any HTTP response existed."""


class RequestTimeoutError(TransportError):
    """The transport gave up waiting for the remote service."""


class ConnectionFailedError(TransportError):
    """DNS, connection or TLS failure."""


class NotJSONError(KoiosError):
    """Response content type is not JSON.

    The raw body is kept on ``body`` so error pages can still be inspected.
    """

    def __init__(self, content_type: str, body: bytes) -> None:
        self.content_type = content_type
        self.body = body
        super().__init__(f"non json response ({content_type or 'no content type'})")


class DecodeError(KoiosError):
    """Body is not valid JSON for the expected payload shape."""


class RemoteError(KoiosError):
    """Remote service answered with a non-200 status."""

    def __init__(
        self, status_code: int, response_error: ResponseError | None = None
    ) -> None:
        self.status_code = status_code
        self.response_error = response_error
        message = response_error.message if response_error else ""
        super().__init__(
            f"{status_code}: {message}" if message else str(status_code)
        )
