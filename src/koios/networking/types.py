"""Response envelope, typed results and the decode helpers endpoints share."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Generic, Mapping, TypeVar

import requests

from .errors import DecodeError, KoiosError, NotJSONError

if TYPE_CHECKING:
    from .tracing import RequestTimer

T = TypeVar("T")


@dataclass
class ResponseError:
    """Error reported by the remote service, or synthesized locally."""

    hint: str = ""
    details: str = ""
    code: str = ""
    message: str = ""

    @classmethod
    def from_body(cls, body: bytes | None) -> ResponseError:
        """Decode a remote error body, or return an empty record.

        Some failures carry no JSON body at all, so an undecodable body is
        not an error here; the caller fills ``message`` from its own error.
        """
        if not body:
            return cls()
        try:
            data = json.loads(body)
        except (ValueError, RecursionError):
            return cls()
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            hint=_text(data.get("hint")),
            details=_text(data.get("details")),
            code=_text(data.get("code")),
            message=_text(data.get("message")),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            key: value
            for key, value in (
                ("hint", self.hint),
                ("details", self.details),
                ("code", self.code),
                ("message", self.message),
            )
            if value
        }


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class RequestStats:
    """Timing of one request; phases are seconds since ``started_at``."""

    started_at: datetime
    dns_lookup_seconds: float | None = None
    connect_seconds: float | None = None
    tls_handshake_seconds: float | None = None
    time_to_first_byte_seconds: float | None = None
    total_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"started_at": self.started_at.isoformat()}
        for key in (
            "dns_lookup_seconds",
            "connect_seconds",
            "tls_handshake_seconds",
            "time_to_first_byte_seconds",
        ):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        out["total_seconds"] = self.total_seconds
        return out


@dataclass
class Response:
    """Metadata, error and stats attached to every typed result."""

    request_url: str = ""
    request_method: str = ""
    status_code: int = 0
    status: str = ""
    date: str = ""
    content_location: str = ""
    content_range: str = ""
    error: ResponseError | None = None
    stats: RequestStats | None = None
    _timer: RequestTimer | None = field(default=None, repr=False, compare=False)

    def start_timer(self, timer: RequestTimer) -> None:
        self._timer = timer

    def apply_response(self, rsp: requests.Response) -> None:
        """Copy status and selected headers from the raw response."""
        self.status_code = rsp.status_code
        self.status = f"{rsp.status_code} {rsp.reason or ''}".strip()
        self.date = rsp.headers.get("date", "")
        self.content_location = rsp.headers.get("content-location", "")
        self.content_range = rsp.headers.get("content-range", "")

    def apply_error(self, body: bytes | None, err: BaseException | None) -> None:
        """Record a failure; the remote body wins over the local message."""
        self.error = ResponseError.from_body(body)
        if err is not None and not self.error.message:
            self.error.message = str(err)
        self.ready()

    def ready(self) -> None:
        """Finalize request stats, if they are being collected."""
        if self._timer is not None and self.stats is None:
            self.stats = self._timer.finish()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "request_url": self.request_url,
            "request_method": self.request_method,
            "status_code": self.status_code,
            "status": self.status,
        }
        if self.date:
            out["date"] = self.date
        if self.content_location:
            out["content_location"] = self.content_location
        if self.content_range:
            out["content_range"] = self.content_range
        if self.error is not None:
            out["error"] = self.error.to_dict()
        if self.stats is not None:
            out["stats"] = self.stats.to_dict()
        return out


@dataclass
class Result(Generic[T]):
    """A typed payload plus the shared response envelope.

    ``error`` is set exactly when ``response.error`` is set.
    """

    response: Response = field(default_factory=Response)
    data: T | None = None
    error: KoiosError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, body: bytes | None, err: KoiosError) -> Result[T]:
        self.response.apply_error(body, err)
        self.error = err
        return self

    def to_dict(self) -> dict[str, Any]:
        out = self.response.to_dict()
        out["response"] = _plain(self.data)
        return out


def _plain(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def read_body(rsp: requests.Response) -> bytes:
    """Return the body of a JSON response.

    Raises:
        NotJSONError: content type does not mention json; the raw bytes are
            available on the exception.
    """
    body = rsp.content or b""
    content_type = rsp.headers.get("Content-Type", "")
    if "json" not in content_type:
        raise NotJSONError(content_type, body)
    return body


def decode_json(body: bytes, decode: Callable[[Any], T]) -> T:
    """Parse ``body`` and build the payload, wrapping any shape mismatch."""
    try:
        return decode(json.loads(body))
    except DecodeError:
        raise
    except (
        ValueError,
        TypeError,
        KeyError,
        AttributeError,
        ArithmeticError,
        RecursionError,
    ) as exc:
        raise DecodeError(f"unexpected response body: {exc}") from exc


def many(factory: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    """Decoder for a JSON array of items."""

    def decode(data: Any) -> list[T]:
        if not isinstance(data, list):
            raise DecodeError(f"expected a list, got {type(data).__name__}")
        return [factory(item) for item in data]

    return decode


def one(factory: Callable[[Any], T]) -> Callable[[Any], T | None]:
    """Decoder for by-key lookups that answer with a list.

    No item means nothing matched and yields ``None`` without an error. More
    than one item is a ``DecodeError``.
    """

    def decode(data: Any) -> T | None:
        items = many(factory)(data)
        if not items:
            return None
        if len(items) > 1:
            raise DecodeError(f"expected at most one item, got {len(items)}")
        return items[0]

    return decode
