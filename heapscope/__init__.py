"""heapscope: query a heap-profiling server and browse class histograms by package."""

from .client import HeapClient
from .config import load_config
from .core import AggregationNode, ClassRegistry, PendingRequestQueue, RequestChain, ResponseDispatcher
from .render import Table, rowtd, rowth, uid
from .sinks import ConsoleSink, MemorySink
from .types import (
    ClassDef,
    HandlerKind,
    HeapscopeConfig,
    HeapscopeError,
    Notice,
    NoticeKind,
    ProtocolError,
    Response,
    Sample,
    TransportError,
    UnknownClassError,
)

__version__ = "0.1.0"

__all__ = [
    "HeapClient",
    "load_config",
    "AggregationNode",
    "ClassRegistry",
    "PendingRequestQueue",
    "RequestChain",
    "ResponseDispatcher",
    "Table",
    "rowtd",
    "rowth",
    "uid",
    "ConsoleSink",
    "MemorySink",
    "ClassDef",
    "HandlerKind",
    "HeapscopeConfig",
    "HeapscopeError",
    "Notice",
    "NoticeKind",
    "ProtocolError",
    "Response",
    "Sample",
    "TransportError",
    "UnknownClassError",
]
