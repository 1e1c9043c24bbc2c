"""Thread-safe HTTP client for the Koios query layer.

Every endpoint wrapper goes through ``Client.fetch``, which drives the
request and the fixed decode sequence, so all results carry the same
envelope and error semantics. One ``Client`` may be shared by any number of
threads for its whole lifetime.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, TypeVar
from urllib.parse import urlencode

import requests
from requests.structures import CaseInsensitiveDict

from .config import DEFAULTS, ClientConfig, ClientDefaults
from .errors import (
    ConfigurationImmutableError,
    ConnectionFailedError,
    DecodeError,
    InvalidArgumentError,
    KoiosError,
    NotJSONError,
    RemoteError,
    RequestTimeoutError,
    TransportError,
)
from .ratelimit import RateLimiter
from .state import ClientState
from .tracing import RequestTimer
from .transport import HttpTransport, Timeout
from .types import Response, Result, decode_json, read_body

logger = logging.getLogger(__name__)

T = TypeVar("T")

Query = Mapping[str, Any]


class Client:
    """Koios API client.

    Defaults come from ``defaults``; keyword overrides are then applied in
    order through the same setters available after construction.
    """

    def __init__(
        self,
        *,
        host: str | None = None,
        api_version: str | None = None,
        port: int | None = None,
        schema: str | None = None,
        rate_limit: int | None = None,
        origin: str | None = None,
        headers: Mapping[str, str] | None = None,
        collect_stats: bool | None = None,
        transport: HttpTransport | None = None,
        defaults: ClientDefaults = DEFAULTS,
    ) -> None:
        self._state = ClientState(defaults.to_config())
        self._limiter = RateLimiter(self._state)
        self._transport: HttpTransport | None = None

        if host is not None:
            self.set_host(host)
        if api_version is not None:
            self.set_api_version(api_version)
        if port is not None:
            self.set_port(port)
        if schema is not None:
            self.set_schema(schema)
        if rate_limit is not None:
            self.set_rate_limit(rate_limit)
        if origin is not None:
            self.set_origin(origin)
        for name, value in (headers or {}).items():
            self.set_header(name, value)
        if collect_stats is not None:
            self.collect_request_stats(collect_stats)

        self._install_transport(
            transport or HttpTransport(timeout_seconds=defaults.timeout_seconds)
        )

    # -- configuration -------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        """Current configuration snapshot."""
        return self._state.snapshot()

    @property
    def base_url(self) -> str:
        return self._state.snapshot().base_url

    @property
    def transport(self) -> HttpTransport:
        assert self._transport is not None
        return self._transport

    @property
    def request_count(self) -> int:
        """Number of requests dispatched by this client."""
        return self._state.request_count

    def set_host(self, host: str) -> None:
        self._state.apply(host=host)

    def set_api_version(self, version: str) -> None:
        self._state.apply(api_version=version)

    def set_port(self, port: int) -> None:
        self._state.apply(port=port)

    def set_schema(self, schema: str) -> None:
        self._state.apply(schema=schema)

    def set_rate_limit(self, requests_per_second: int) -> None:
        """Allow at most ``requests_per_second`` (1-255) request starts."""
        self._state.apply(rate_limit=requests_per_second)

    def set_origin(self, origin: str) -> None:
        """Set the Origin header, which must be an absolute URL."""
        self._state.apply(origin=origin)

    def set_header(self, name: str, value: str) -> None:
        """Add or replace a header sent with every request."""
        self._state.set_header(name, value)

    def collect_request_stats(self, enabled: bool) -> None:
        self._state.apply(collect_stats=bool(enabled))

    def set_transport(self, transport: HttpTransport) -> None:
        """Transport can only be chosen at construction."""
        self._install_transport(transport)

    def _install_transport(self, transport: HttpTransport) -> None:
        if self._transport is not None:
            raise ConfigurationImmutableError(
                "transport can only be set when the client is created"
            )
        self._transport = transport

    def close(self) -> None:
        self.transport.close()

    # -- requests ------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *query: Query,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        envelope: Response | None = None,
        timeout: Timeout | None = None,
    ) -> requests.Response:
        """Dispatch one request and return the raw response.

        Status codes are not interpreted. ``envelope`` receives the request
        URL and method before dispatch so failures still identify the call.
        ``timeout`` overrides the transport timeout for this call only.

        Raises:
            InvalidArgumentError: more than one query parameter set, or a
                timeout override that is not positive.
            TransportError: the call produced no HTTP response.
        """
        if len(query) > 1:
            raise InvalidArgumentError(
                "only a single set of query parameters may be provided"
            )
        resolved_timeout = self.transport.resolve_timeout(timeout)
        params = dict(query[0]) if query else None
        config = self._state.snapshot()
        method = method.upper()
        url = config.base_url + path

        if envelope is not None:
            envelope.request_method = method
            envelope.request_url = (
                f"{url}?{urlencode(params, doseq=True)}" if params else url
            )

        merged: CaseInsensitiveDict[str] = CaseInsensitiveDict(config.headers)
        merged["Origin"] = config.origin
        if headers:
            merged.update(headers)

        self._limiter.acquire()
        timer = RequestTimer() if config.collect_stats else None
        if timer is not None and envelope is not None:
            envelope.start_timer(timer)
        self._state.count_request()
        logger.debug("dispatching %s %s", method, url)
        try:
            if timer is None:
                return self.transport.send(
                    method,
                    url,
                    params=params,
                    body=body,
                    headers=merged,
                    timeout=resolved_timeout,
                )
            with timer.activate():
                return self.transport.send(
                    method,
                    url,
                    params=params,
                    body=body,
                    headers=merged,
                    hooks={"response": timer.on_response},
                    timeout=resolved_timeout,
                )
        except requests.exceptions.Timeout as exc:
            raise RequestTimeoutError(str(exc)) from exc
        except requests.exceptions.ConnectionError as exc:
            raise ConnectionFailedError(str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(str(exc)) from exc

    def fetch(
        self,
        method: str,
        path: str,
        *query: Query,
        decode: Callable[[Any], T],
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: Timeout | None = None,
    ) -> Result[T]:
        """Run a request through the fixed decode sequence.

        Never raises for per-request failures; they are recorded on the
        result's envelope and on ``Result.error``. A call that outlives
        ``timeout`` (or the transport timeout) ends with ``RequestTimeoutError``.
        """
        result: Result[T] = Result()
        envelope = result.response
        try:
            rsp = self.request(
                method,
                path,
                *query,
                body=body,
                headers=headers,
                envelope=envelope,
                timeout=timeout,
            )
        except KoiosError as exc:
            logger.debug("request %s %s failed: %s", method, path, exc)
            return result.fail(None, exc)

        envelope.apply_response(rsp)
        try:
            raw = read_body(rsp)
        except NotJSONError as exc:
            return self._fail(result, rsp, exc.body, exc)

        try:
            data = decode_json(raw, decode)
        except DecodeError as exc:
            return self._fail(result, rsp, raw, exc)

        if rsp.status_code != requests.codes.ok:
            return self._fail(result, rsp, raw, None)

        envelope.ready()
        result.data = data
        return result

    @staticmethod
    def _fail(
        result: Result[T],
        rsp: requests.Response,
        body: bytes | None,
        exc: KoiosError | None,
    ) -> Result[T]:
        envelope = result.response
        envelope.apply_error(body, exc)
        if rsp.status_code == requests.codes.ok:
            result.error = exc
            return result
        remote = RemoteError(rsp.status_code, envelope.error)
        remote.__cause__ = exc
        result.error = remote
        logger.debug(
            "%s %s answered %s",
            envelope.request_method,
            envelope.request_url,
            envelope.status,
        )
        return result
