"""Python client for the Koios query layer over the Cardano blockchain."""

from __future__ import annotations

import logging

from koios.networking.client import Client
from koios.networking.config import (
    DEFAULT_API_VERSION,
    DEFAULT_ORIGIN,
    DEFAULT_PORT,
    DEFAULT_RATE_LIMIT,
    DEFAULT_SCHEMA,
    DEFAULTS,
    GUILD_HOST,
    LIBRARY_VERSION,
    MAINNET_HOST,
    TESTNET_HOST,
    ClientConfig,
    ClientDefaults,
)
from koios.networking.errors import (
    ConfigurationImmutableError,
    ConnectionFailedError,
    DecodeError,
    InvalidArgumentError,
    InvalidConfigurationError,
    KoiosError,
    NotJSONError,
    RemoteError,
    RequestTimeoutError,
    TransportError,
)
from koios.networking.transport import HttpTransport
from koios.networking.types import RequestStats, Response, ResponseError, Result

__version__ = LIBRARY_VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Client",
    "ClientConfig",
    "ClientDefaults",
    "ConfigurationImmutableError",
    "ConnectionFailedError",
    "DecodeError",
    "DEFAULTS",
    "DEFAULT_API_VERSION",
    "DEFAULT_ORIGIN",
    "DEFAULT_PORT",
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_SCHEMA",
    "GUILD_HOST",
    "HttpTransport",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "KoiosError",
    "MAINNET_HOST",
    "NotJSONError",
    "RemoteError",
    "RequestStats",
    "RequestTimeoutError",
    "Response",
    "ResponseError",
    "Result",
    "TESTNET_HOST",
    "TransportError",
]
