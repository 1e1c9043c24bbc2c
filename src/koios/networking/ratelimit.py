"""Outbound request throttle shared by all callers of one client."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .state import ClientState

logger = logging.getLogger(__name__)


class RateLimiter:
    """Spaces request start times by the configured minimum interval.

    The throttle is global per client, not per endpoint. Concurrent callers
    each reserve a distinct slot, so in-flight requests may overlap but no two
    dispatches start closer than ``1 / rate_limit`` seconds apart.
    """

    def __init__(
        self,
        state: ClientState,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._state = state
        self._clock = clock
        self._sleep = sleep

    def acquire(self) -> float:
        """Block until the caller may dispatch; return the seconds waited."""
        delay = self._state.reserve(self._clock())
        if delay > 0:
            logger.debug("rate limit reached, waiting %.4fs", delay)
            self._sleep(delay)
            return delay
        return 0.0
