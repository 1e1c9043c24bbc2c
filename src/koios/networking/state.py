"""Lock-guarded mutable state shared by every caller of a Client."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any

from .config import ClientConfig

logger = logging.getLogger(__name__)


class ClientState:
    """Holds the current ``ClientConfig``, the rate limiter watermark and the
    request counter.

    Reads return the current immutable snapshot. Writes, watermark updates and
    counter increments take the exclusive lock; no lock is held while
    sleeping or doing I/O.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._lock = threading.Lock()
        self._config = config
        self._last_request_at = float("-inf")
        self._request_count = 0

    def snapshot(self) -> ClientConfig:
        """Return the configuration currently in effect."""
        return self._config

    @property
    def request_count(self) -> int:
        return self._request_count

    def apply(self, **changes: Any) -> ClientConfig:
        """Validate and install a new snapshot with ``changes`` applied.

        Raises:
            InvalidConfigurationError: if the new values are rejected. The
                previous snapshot stays in effect.
        """
        with self._lock:
            config = replace(self._config, **changes)
            self._config = config
        logger.debug("client configuration updated: %s", sorted(changes))
        return config

    def set_header(self, name: str, value: str) -> ClientConfig:
        """Add or replace one common header; names compare case-insensitively."""
        with self._lock:
            headers = {
                key: val
                for key, val in self._config.headers.items()
                if key.lower() != name.lower()
            }
            headers[name] = value
            config = replace(self._config, headers=headers)
            self._config = config
        logger.debug("client header updated: %s", name)
        return config

    def reserve(self, now: float) -> float:
        """Claim the next dispatch slot and return how long to wait for it."""
        with self._lock:
            start = max(now, self._last_request_at + self._config.min_interval)
            self._last_request_at = start
        return start - now

    def count_request(self) -> int:
        """Record one dispatched request and return the new total."""
        with self._lock:
            self._request_count += 1
            return self._request_count
