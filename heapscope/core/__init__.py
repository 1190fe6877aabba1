from .aggregation import AggregationNode
from .chain import PendingRequestQueue, RequestChain
from .dispatcher import ResponseDispatcher
from .registry import ClassRegistry
from .transport import HttpTransport

__all__ = [
    "AggregationNode",
    "ClassRegistry",
    "HttpTransport",
    "PendingRequestQueue",
    "RequestChain",
    "ResponseDispatcher",
]
