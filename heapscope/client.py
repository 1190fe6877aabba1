"""HeapClient: one heap-profiling session.

Owns the class registry, the pending-request queue, the dispatcher and the
transport. Exchanges (fetch + dispatch) run one at a time under an
``asyncio.Lock``; requests waiting for the lock proceed in the order they
were issued.

Usage:

    async with HeapClient(config, sink=ConsoleSink()) as client:
        client.init()
        await client.join()
"""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

from .config import load_config
from .core.chain import PendingRequestQueue, RequestChain
from .core.dispatcher import ResponseDispatcher
from .core.registry import ClassRegistry
from .core.transport import HttpTransport
from .sinks import MemorySink
from .types import (
    HeapscopeConfig,
    Notice,
    NoticeKind,
    PresentationSink,
    Response,
    Transport,
    TransportError,
)

logger = logging.getLogger(__name__)


class HeapClient:
    """Issues requests and dispatches their responses into a sink."""

    def __init__(
        self,
        config: HeapscopeConfig | None = None,
        sink: PresentationSink | None = None,
        transport: Transport | None = None,
    ) -> None:
        if sink is None:
            sink = MemorySink()
        self.config = config or load_config(config_dict={})
        self.sink = sink
        self.transport = transport or HttpTransport(
            base_url=self.config.server.base_url,
            timeout=self.config.server.timeout,
        )
        self.registry = ClassRegistry()
        self.queue = PendingRequestQueue()
        self.dispatcher = ResponseDispatcher(
            self.registry,
            sink,
            self.queue,
            fire=self.request,
            render_config=self.config.render,
        )
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._errors: list[BaseException] = []

    async def __aenter__(self) -> HeapClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- requests ------------------------------------------------------------

    def request(self, url: str) -> RequestChain:
        """Issue a request for *url*. Must be called with a running event loop."""
        task = asyncio.get_running_loop().create_task(self._exchange(url))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return RequestChain(url, self.queue, task)

    def query_url(self, query: str) -> str:
        return f"{self.config.server.query_path}?{urlencode({'q': query})}"

    def query(self, query: str) -> RequestChain:
        return self.request(self.query_url(query))

    def init(self, query: str | None = None) -> RequestChain:
        """Start a session: reset, load class definitions, run the first query."""
        server = self.config.server
        chain = self.request(server.init_path)
        chain.then(server.classes_path)
        chain.then(self.query_url(query or self.config.init_query))
        return chain

    async def _exchange(self, url: str) -> Response:
        async with self._lock:
            try:
                payload = await self.transport.fetch(url)
            except TransportError as e:
                # Queue is not drained: the chain stalls here.
                logger.error("Request %s failed: %s", url, e)
                self.sink.notify(Notice(
                    NoticeKind.TRANSPORT_ERROR,
                    f"Internal error, response processing failed: {e}",
                    fatal=True,
                ))
                raise
            return self.dispatcher.dispatch(payload, url=url)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._errors.append(exc)

    # -- lifecycle -----------------------------------------------------------

    @property
    def idle(self) -> bool:
        return not self._tasks

    async def join(self) -> list[BaseException]:
        """Wait until no request is in flight or waiting, chained ones included.

        Returns the errors raised by exchanges since the last ``join``.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        errors, self._errors = self._errors, []
        return errors

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()
