"""Shared client runtime: configuration, throttling, transport and decoding."""

from .client import Client
from .config import ClientConfig, ClientDefaults
from .transport import HttpTransport
from .types import RequestStats, Response, ResponseError, Result

__all__ = [
    "Client",
    "ClientConfig",
    "ClientDefaults",
    "HttpTransport",
    "RequestStats",
    "Response",
    "ResponseError",
    "Result",
]
