import threading
import time

import pytest

from koios.networking.config import DEFAULTS
from koios.networking.errors import InvalidConfigurationError
from koios.networking.ratelimit import RateLimiter
from koios.networking.state import ClientState


class FakeClock:
    """Monotonic clock that only advances when the limiter sleeps."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _state(rate_limit: int) -> ClientState:
    state = ClientState(DEFAULTS.to_config())
    state.apply(rate_limit=rate_limit)
    return state


def test_first_acquire_does_not_wait():
    clock = FakeClock()
    limiter = RateLimiter(_state(5), clock=clock, sleep=clock.sleep)

    assert limiter.acquire() == 0.0
    assert clock.sleeps == []


@pytest.mark.parametrize("rate_limit", [1, 2, 5, 100, 255])
def test_consecutive_starts_are_spaced(rate_limit):
    clock = FakeClock()
    limiter = RateLimiter(_state(rate_limit), clock=clock, sleep=clock.sleep)
    interval = 1 / rate_limit

    starts = []
    for _ in range(6):
        limiter.acquire()
        starts.append(clock())

    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(gap >= interval - 1e-9 for gap in gaps)
    assert len(clock.sleeps) == 5


def test_no_wait_once_interval_elapsed():
    clock = FakeClock()
    limiter = RateLimiter(_state(5), clock=clock, sleep=clock.sleep)

    limiter.acquire()
    clock.now += 1.0

    assert limiter.acquire() == 0.0
    assert clock.sleeps == []


def test_partial_wait_covers_remaining_interval():
    clock = FakeClock()
    limiter = RateLimiter(_state(4), clock=clock, sleep=clock.sleep)

    limiter.acquire()
    clock.now += 0.1

    assert limiter.acquire() == pytest.approx(0.15)


def test_concurrent_callers_reserve_distinct_slots():
    state = _state(10)
    limiter = RateLimiter(state, clock=lambda: 0.0, sleep=lambda seconds: None)
    delays = []
    lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        delay = limiter.acquire()
        with lock:
            delays.append(delay)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(delays) == pytest.approx([i * 0.1 for i in range(8)])


def test_real_clock_spacing():
    limiter = RateLimiter(_state(50))

    began = time.monotonic()
    for _ in range(5):
        limiter.acquire()
    elapsed = time.monotonic() - began

    assert elapsed >= 4 * 0.02 - 0.001


def test_zero_rate_limit_rejected_and_previous_kept():
    state = _state(7)

    with pytest.raises(InvalidConfigurationError):
        state.apply(rate_limit=0)

    assert state.snapshot().rate_limit == 7
    assert state.snapshot().min_interval == pytest.approx(1 / 7)


def test_new_limit_applies_to_next_reservation():
    clock = FakeClock()
    state = _state(1)
    limiter = RateLimiter(state, clock=clock, sleep=clock.sleep)

    limiter.acquire()
    state.apply(rate_limit=10)

    assert limiter.acquire() == pytest.approx(0.1)
