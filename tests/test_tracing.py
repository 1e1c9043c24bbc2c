# pyright: reportUnknownMemberType=false, reportPrivateUsage=false
import dataclasses
from unittest.mock import Mock, patch

import pytest
from urllib3.connection import HTTPConnection, HTTPSConnection

from koios.networking import tracing
from koios.networking.tracing import (
    RequestTimer,
    TracedHTTPConnection,
    TracedHTTPConnectionPool,
    TracedHTTPSConnection,
    TracedHTTPSConnectionPool,
    TracingAdapter,
)


class StepClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_phases_are_relative_to_start():
    clock = StepClock()
    clock.now = 10.0
    timer = RequestTimer(clock)

    clock.now = 10.01
    timer.mark_dns_resolved()
    clock.now = 10.03
    timer.mark_connected()
    clock.now = 10.07
    timer.mark_tls_done()
    clock.now = 10.2
    response = Mock()
    assert timer.on_response(response) is response
    clock.now = 10.5
    stats = timer.finish()

    assert stats.dns_lookup_seconds == pytest.approx(0.01)
    assert stats.connect_seconds == pytest.approx(0.03)
    assert stats.tls_handshake_seconds == pytest.approx(0.07)
    assert stats.time_to_first_byte_seconds == pytest.approx(0.2)
    assert stats.total_seconds == pytest.approx(0.5)
    assert stats.started_at == timer.started_at


def test_first_byte_is_stamped_once():
    clock = StepClock()
    timer = RequestTimer(clock)

    clock.now = 1.0
    timer.mark_first_byte()
    clock.now = 2.0
    timer.mark_first_byte()

    assert timer.finish().time_to_first_byte_seconds == 1.0


def test_finish_is_final():
    clock = StepClock()
    timer = RequestTimer(clock)

    clock.now = 1.0
    first = timer.finish()
    clock.now = 5.0

    assert timer.finish() is first
    assert first.total_seconds == 1.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.total_seconds = 2.0  # type: ignore[misc]


def test_unobserved_phases_stay_empty():
    stats = RequestTimer().finish()

    assert stats.dns_lookup_seconds is None
    assert stats.connect_seconds is None
    assert stats.tls_handshake_seconds is None
    assert stats.time_to_first_byte_seconds is None
    assert "connect_seconds" not in stats.to_dict()


def test_activate_publishes_timer_for_current_context():
    timer = RequestTimer()

    assert tracing._active_timer.get() is None
    with timer.activate():
        assert tracing._active_timer.get() is timer
    assert tracing._active_timer.get() is None


@patch("koios.networking.tracing.socket.getaddrinfo")
@patch.object(HTTPConnection, "_new_conn")
def test_new_connection_stamps_resolution_and_connect(new_conn, getaddrinfo):
    sock = Mock()
    new_conn.return_value = sock
    timer = RequestTimer()
    conn = TracedHTTPConnection("example.com", 80)

    with timer.activate():
        assert conn._new_conn() is sock

    getaddrinfo.assert_called_once()
    stats = timer.finish()
    assert stats.dns_lookup_seconds is not None
    assert stats.connect_seconds is not None
    assert stats.connect_seconds >= stats.dns_lookup_seconds


@patch("koios.networking.tracing.socket.getaddrinfo")
@patch.object(HTTPConnection, "_new_conn")
def test_failed_resolution_lookup_is_not_surfaced(new_conn, getaddrinfo):
    getaddrinfo.side_effect = OSError("no resolver")
    timer = RequestTimer()
    conn = TracedHTTPConnection("example.com", 80)

    with timer.activate():
        conn._new_conn()

    stats = timer.finish()
    assert stats.dns_lookup_seconds is None
    assert stats.connect_seconds is not None


@patch("koios.networking.tracing.socket.getaddrinfo")
@patch.object(HTTPConnection, "_new_conn")
def test_no_instrumentation_without_active_timer(new_conn, getaddrinfo):
    conn = TracedHTTPConnection("example.com", 80)

    conn._new_conn()

    getaddrinfo.assert_not_called()
    new_conn.assert_called_once()


@patch.object(HTTPSConnection, "connect")
def test_https_connect_stamps_tls(connect):
    timer = RequestTimer()
    conn = TracedHTTPSConnection("example.com", 443)

    with timer.activate():
        conn.connect()

    connect.assert_called_once()
    assert timer.finish().tls_handshake_seconds is not None


def test_adapter_installs_traced_pools():
    adapter = TracingAdapter()

    classes = adapter.poolmanager.pool_classes_by_scheme
    assert classes["http"] is TracedHTTPConnectionPool
    assert classes["https"] is TracedHTTPSConnectionPool
    pool = adapter.poolmanager.connection_from_url("https://api.koios.rest")
    assert isinstance(pool, TracedHTTPSConnectionPool)
    assert pool.ConnectionCls is TracedHTTPSConnection
