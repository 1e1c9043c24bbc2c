"""Configuration models for the Koios client."""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from urllib.parse import urlsplit

from .errors import InvalidConfigurationError

LIBRARY_VERSION = "0.1.0"

MAINNET_HOST = "api.koios.rest"
GUILD_HOST = "guild.koios.rest"
TESTNET_HOST = "testnet.koios.rest"
DEFAULT_API_VERSION = "v0"
DEFAULT_PORT = 443
DEFAULT_SCHEMA = "https"
DEFAULT_RATE_LIMIT = 5
DEFAULT_ORIGIN = "https://github.com/howijd/koios-rest-go-client"
DEFAULT_TIMEOUT_SECONDS = 60.0

MIN_RATE_LIMIT = 1
MAX_RATE_LIMIT = 255
SCHEMAS = frozenset({"http", "https"})


def user_agent() -> str:
    """Return the identifying User-Agent sent with every request."""

    system = platform.system() or "unknown"
    machine = platform.machine() or "unknown"
    return (
        f"koios-python/{LIBRARY_VERSION} ({system.title()} {machine}) "
        f"python/{platform.python_version()}"
    )


def _default_headers() -> Mapping[str, str]:
    return MappingProxyType(
        {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": user_agent(),
        }
    )


def validate_origin(origin: str) -> str:
    """Return ``origin`` if it parses as an absolute URL."""

    try:
        parts = urlsplit(origin)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"invalid origin {origin!r}") from exc
    if not parts.scheme or not parts.netloc:
        raise InvalidConfigurationError(
            f"origin must be an absolute URL, got {origin!r}"
        )
    return origin


def validate_rate_limit(rate_limit: int) -> int:
    if isinstance(rate_limit, bool) or not isinstance(rate_limit, int):
        raise InvalidConfigurationError("rate limit must be an integer")
    if not MIN_RATE_LIMIT <= rate_limit <= MAX_RATE_LIMIT:
        raise InvalidConfigurationError(
            f"rate limit must be between {MIN_RATE_LIMIT}-{MAX_RATE_LIMIT} "
            "requests per sec"
        )
    return rate_limit


@dataclass(frozen=True)
class ClientConfig:
    """One consistent snapshot of client configuration.

    Instances are never mutated; ``ClientState`` swaps in a new snapshot for
    every change, so ``base_url`` always matches the other fields.
    """

    host: str
    api_version: str
    port: int
    schema: str
    origin: str
    rate_limit: int
    headers: Mapping[str, str] = field(default_factory=_default_headers)
    collect_stats: bool = False
    base_url: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.host:
            raise InvalidConfigurationError("host must not be empty")
        if not self.api_version:
            raise InvalidConfigurationError("api version must not be empty")
        if (
            isinstance(self.port, bool)
            or not isinstance(self.port, int)
            or not 0 <= self.port <= 65535
        ):
            raise InvalidConfigurationError("port must be between 0-65535")
        if self.schema not in SCHEMAS:
            raise InvalidConfigurationError(
                f"schema must be one of {sorted(SCHEMAS)}, got {self.schema!r}"
            )
        validate_origin(self.origin)
        validate_rate_limit(self.rate_limit)

        object.__setattr__(
            self, "headers", MappingProxyType(dict(self.headers))
        )
        object.__setattr__(
            self,
            "base_url",
            f"{self.schema}://{self.host}:{self.port}/api/{self.api_version}",
        )

    @property
    def min_interval(self) -> float:
        """Minimum spacing in seconds between two request starts."""
        return 1.0 / self.rate_limit


@dataclass(frozen=True)
class ClientDefaults:
    """Immutable defaults a ``Client`` starts from before overrides apply."""

    host: str = MAINNET_HOST
    api_version: str = DEFAULT_API_VERSION
    port: int = DEFAULT_PORT
    schema: str = DEFAULT_SCHEMA
    rate_limit: int = DEFAULT_RATE_LIMIT
    origin: str = DEFAULT_ORIGIN
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    headers: Mapping[str, str] = field(default_factory=_default_headers)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise InvalidConfigurationError("timeout_seconds must be > 0")
        object.__setattr__(
            self, "headers", MappingProxyType(dict(self.headers))
        )

    def to_config(self) -> ClientConfig:
        return ClientConfig(
            host=self.host,
            api_version=self.api_version,
            port=self.port,
            schema=self.schema,
            origin=self.origin,
            rate_limit=self.rate_limit,
            headers=self.headers,
        )


DEFAULTS = ClientDefaults()
