"""Per-request timing instrumentation.

A ``RequestTimer`` is only created when stats collection is enabled. While a
request runs, the timer is published through a context variable; connections
created by ``TracingAdapter`` pools stamp it as they resolve, connect and
finish the TLS handshake, and a ``requests`` response hook stamps the first
byte. Pooled connections that are reused report no connection phases.

urllib3 resolves the host inside ``create_connection`` and exposes no hook
for it, so the DNS phase is measured by a separate ``getaddrinfo`` issued just
before the real connect. Every new connection opened while a timer is active
therefore costs one extra lookup, and the value reported is the time of that
lookup rather than of the one urllib3 makes. Without stats enabled no extra
lookup happens.
"""

from __future__ import annotations

import logging
import socket
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Callable, Iterator

import requests
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from .types import RequestStats

logger = logging.getLogger(__name__)

_active_timer: ContextVar[RequestTimer | None] = ContextVar(
    "koios_request_timer", default=None
)


class RequestTimer:
    """Collects phase timestamps for a single request."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self.started_at = datetime.now(timezone.utc)
        self._start = clock()
        self._dns: float | None = None
        self._connect: float | None = None
        self._tls: float | None = None
        self._first_byte: float | None = None
        self._stats: RequestStats | None = None

    def _elapsed(self) -> float:
        return self._clock() - self._start

    def mark_dns_resolved(self) -> None:
        self._dns = self._elapsed()

    def mark_connected(self) -> None:
        self._connect = self._elapsed()

    def mark_tls_done(self) -> None:
        self._tls = self._elapsed()

    def mark_first_byte(self) -> None:
        if self._first_byte is None:
            self._first_byte = self._elapsed()

    def on_response(
        self, response: requests.Response, *args: Any, **kwargs: Any
    ) -> requests.Response:
        """``requests`` response hook; runs once headers have arrived."""
        self.mark_first_byte()
        return response

    @contextmanager
    def activate(self) -> Iterator[RequestTimer]:
        """Publish this timer to connections opened in the current context."""
        token = _active_timer.set(self)
        try:
            yield self
        finally:
            _active_timer.reset(token)

    def finish(self) -> RequestStats:
        """Finalize total duration; later calls return the same record."""
        if self._stats is None:
            self._stats = RequestStats(
                started_at=self.started_at,
                dns_lookup_seconds=self._dns,
                connect_seconds=self._connect,
                tls_handshake_seconds=self._tls,
                time_to_first_byte_seconds=self._first_byte,
                total_seconds=self._elapsed(),
            )
        return self._stats


def _stamp_resolution(timer: RequestTimer, host: str, port: int) -> None:
    try:
        socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError as exc:
        logger.debug("timing lookup for %s failed: %s", host, exc)
        return
    timer.mark_dns_resolved()


class _TracedConnectionMixin:
    _dns_host: str
    port: int

    def _new_conn(self) -> socket.socket:
        timer = _active_timer.get()
        if timer is not None:
            _stamp_resolution(timer, self._dns_host, self.port)
        sock = super()._new_conn()  # type: ignore[misc]
        if timer is not None:
            timer.mark_connected()
        return sock


class TracedHTTPConnection(_TracedConnectionMixin, HTTPConnection):
    pass


class TracedHTTPSConnection(_TracedConnectionMixin, HTTPSConnection):
    def connect(self) -> None:
        super().connect()
        timer = _active_timer.get()
        if timer is not None:
            timer.mark_tls_done()


class TracedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = TracedHTTPConnection


class TracedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = TracedHTTPSConnection


class TracingAdapter(HTTPAdapter):
    """HTTPAdapter whose pools report connection phases to the active timer."""

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": TracedHTTPConnectionPool,
            "https": TracedHTTPSConnectionPool,
        }
