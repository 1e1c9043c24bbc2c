"""HTTP transport owned by a Client."""

from __future__ import annotations

from typing import Any, Callable, Mapping

import requests

from .config import DEFAULT_TIMEOUT_SECONDS
from .errors import InvalidArgumentError, InvalidConfigurationError
from .tracing import TracingAdapter

Timeout = float | tuple[float, float]


class HttpTransport:
    """A ``requests.Session`` plus the timeouts used for every call.

    A missing or zero timeout is rejected: a request without a timeout can
    hang a production caller forever.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
        connect_timeout_seconds: float | None = None,
        read_timeout_seconds: float | None = None,
        verify_tls: bool = True,
    ) -> None:
        has_connect_timeout = connect_timeout_seconds is not None
        has_read_timeout = read_timeout_seconds is not None
        if has_connect_timeout != has_read_timeout:
            raise InvalidConfigurationError(
                "connect_timeout_seconds and read_timeout_seconds "
                "must be set together"
            )
        if connect_timeout_seconds is not None and connect_timeout_seconds <= 0:
            raise InvalidConfigurationError(
                "connect_timeout_seconds must be > 0 when provided"
            )
        if read_timeout_seconds is not None and read_timeout_seconds <= 0:
            raise InvalidConfigurationError(
                "read_timeout_seconds must be > 0 when provided"
            )
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise InvalidConfigurationError(
                "timeout_seconds must be > 0 when provided"
            )
        if timeout_seconds is None and not has_connect_timeout:
            raise InvalidConfigurationError(
                "a timeout is required, it should never be 0 in production"
            )

        self._timeout_seconds = timeout_seconds
        self._connect_timeout_seconds = connect_timeout_seconds
        self._read_timeout_seconds = read_timeout_seconds
        self.verify_tls = verify_tls
        if session is None:
            session = requests.Session()
            adapter = TracingAdapter()
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    @property
    def timeout_seconds(self) -> float | None:
        return self._timeout_seconds

    @property
    def connect_timeout_seconds(self) -> float | None:
        return self._connect_timeout_seconds

    @property
    def read_timeout_seconds(self) -> float | None:
        return self._read_timeout_seconds

    @property
    def timeout(self) -> Timeout:
        """Default timeout passed to ``requests``."""
        if (
            self._connect_timeout_seconds is not None
            and self._read_timeout_seconds is not None
        ):
            return (self._connect_timeout_seconds, self._read_timeout_seconds)
        assert self._timeout_seconds is not None
        return self._timeout_seconds

    def resolve_timeout(self, override: Timeout | None) -> Timeout:
        """Resolve a per-call timeout preference against the default.

        Raises:
            InvalidArgumentError: ``override`` is not positive.
        """
        if override is None:
            return self.timeout
        values = override if isinstance(override, tuple) else (override,)
        if any(value <= 0 for value in values):
            raise InvalidArgumentError("timeout override must be > 0 when provided")
        return override

    def send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        hooks: Mapping[str, Callable[..., Any]] | None = None,
        timeout: Timeout | None = None,
    ) -> requests.Response:
        """Execute one HTTP call; raises ``requests`` exceptions unchanged."""
        data: Any = None
        json_body: Any = None
        if isinstance(body, (bytes, str)):
            data = body
        elif body is not None:
            json_body = body
        return self.session.request(
            method,
            url,
            params=params,
            data=data,
            json=json_body,
            headers=headers,
            hooks=dict(hooks) if hooks else None,
            timeout=self.resolve_timeout(timeout),
            verify=self.verify_tls,
        )

    def close(self) -> None:
        self.session.close()
