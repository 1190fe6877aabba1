"""All dataclasses, enums, Protocols and exceptions for heapscope."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class HeapscopeError(Exception):
    """Base class for every error raised by heapscope."""


class TransportError(HeapscopeError):
    """The request failed at the channel level; no usable response arrived."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ProtocolError(HeapscopeError):
    """A response arrived but its kind or shape is not understood."""

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.kind = kind


class UnknownClassError(HeapscopeError, LookupError):
    """A sample referenced a class id that was never registered."""

    def __init__(self, class_id: int):
        super().__init__(f"Class id {class_id} is not registered")
        self.class_id = class_id


# ---------------------------------------------------------------------------
# Wire model
# ---------------------------------------------------------------------------

class HandlerKind(str, Enum):
    """Closed set of response kinds a server may declare."""

    ERROR = "Error"
    INIT_UI = "InitUI"
    CLASS_DEFS = "ClassDefs"
    HISTO = "Histo"


def _field(raw: Any, key: str, expected: type, kind: HandlerKind) -> Any:
    """Return ``raw[key]`` if it is exactly of *expected* type (bools are not ints)."""
    try:
        value = raw[key]
    except (KeyError, TypeError) as e:
        raise ProtocolError(f"Missing field {key!r} in {raw!r}", kind=kind.value) from e
    if not isinstance(value, expected) or isinstance(value, bool):
        raise ProtocolError(
            f"Field {key!r} must be {expected.__name__}, got {value!r}",
            kind=kind.value,
        )
    return value


@dataclass(frozen=True)
class ClassDef:
    """Server-registered heap object type. ``name`` is dotted, e.g. ``a.b.Foo``."""
    id: int
    name: str

    @classmethod
    def from_payload(cls, raw: Any) -> ClassDef:
        kind = HandlerKind.CLASS_DEFS
        return cls(id=_field(raw, "id", int, kind), name=_field(raw, "name", str, kind))


@dataclass(frozen=True)
class Sample:
    """One histogram measurement: ``count`` objects of a class using ``byte_size`` bytes."""
    class_id: int
    count: int
    byte_size: int

    @classmethod
    def from_payload(cls, raw: Any) -> Sample:
        kind = HandlerKind.HISTO
        sample = cls(
            class_id=_field(raw, "id", int, kind),
            count=_field(raw, "count", int, kind),
            byte_size=_field(raw, "nbytes", int, kind),
        )
        if sample.count < 0 or sample.byte_size < 0:
            raise ProtocolError(
                f"Negative totals in histogram entry {raw!r}",
                kind=kind.value,
            )
        return sample


@dataclass
class Response:
    """A decoded server response: the declared kind plus its payload."""
    kind: HandlerKind
    data: Any = None
    url: str = ""

    @classmethod
    def from_payload(cls, payload: Any, url: str = "") -> Response:
        if not isinstance(payload, dict) or "handler" not in payload:
            raise ProtocolError(f"Response from {url or '?'} has no handler field")
        raw_kind = payload["handler"]
        try:
            kind = HandlerKind(raw_kind)
        except ValueError:
            raise ProtocolError(
                f"Unknown response handler {raw_kind!r}", kind=str(raw_kind)
            ) from None
        return cls(kind=kind, data=payload.get("data"), url=url)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class NoticeKind(str, Enum):
    SERVER_ERROR = "server_error"        # server-declared Error response
    PROTOCOL_ERROR = "protocol_error"    # client/server version skew
    INVARIANT_ERROR = "invariant_error"  # sample before its class definition
    TRANSPORT_ERROR = "transport_error"  # request never produced a response


@dataclass
class Notice:
    """User-visible notification handed to a presentation sink."""
    kind: NoticeKind
    message: str
    fatal: bool = False


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

@runtime_checkable
class PresentationSink(Protocol):
    def add_tab(self, name: str, content: Any) -> None: ...

    def notify(self, notice: Notice) -> None: ...


@runtime_checkable
class Transport(Protocol):
    async def fetch(self, url: str) -> Any: ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

SORT_ORDERS = ("label", "count", "bytes")


@dataclass
class ServerConfig:
    base_url: str = "http://127.0.0.1:7070"
    query_path: str = "query"
    init_path: str = "init"
    classes_path: str = "classes"
    timeout: float | None = None  # None: wait forever, a hung request stalls the chain


@dataclass
class RenderConfig:
    tab_title: str = "Histogram"
    sort_by: str = "label"   # "label", "count" or "bytes"
    expand_depth: int = 0    # console only: extra levels printed below the root


@dataclass
class HeapscopeConfig:
    version: str = "0.1"
    init_query: str = "histo(x) from Object x"
    log_level: str = "WARNING"
    server: ServerConfig = field(default_factory=ServerConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
