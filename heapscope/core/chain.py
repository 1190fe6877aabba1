"""PendingRequestQueue and the RequestChain handle returned by every request."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Generator
from typing import Any


class PendingRequestQueue:
    """FIFO of deferred request URLs.

    One queue per client session. Entries are popped one at a time by the
    dispatcher, each only after the previous response's handler returned.
    """

    def __init__(self) -> None:
        self._urls: deque[str] = deque()

    def push(self, url: str) -> None:
        self._urls.append(url)

    def pop(self) -> str | None:
        """Remove and return the oldest URL, or None when empty."""
        if not self._urls:
            return None
        return self._urls.popleft()

    def clear(self) -> None:
        self._urls.clear()

    def __len__(self) -> int:
        return len(self._urls)

    def __bool__(self) -> bool:
        return bool(self._urls)

    def __iter__(self):
        return iter(list(self._urls))


class RequestChain:
    """Handle for one issued request.

    ``then(url)`` appends *url* to the session's pending queue, so it fires
    after the handler of whatever request precedes it in that queue (the
    queue is shared by the whole session). Awaiting the handle waits for
    this request's own exchange and returns its decoded response.
    """

    def __init__(
        self,
        url: str,
        queue: PendingRequestQueue,
        task: asyncio.Task | None = None,
    ) -> None:
        self.url = url
        self._queue = queue
        self._task = task

    def __repr__(self) -> str:
        return f"RequestChain({self.url!r}, done={self.done})"

    def then(self, next_url: str) -> RequestChain:
        self._queue.push(next_url)
        return self

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def __await__(self) -> Generator[Any, None, Any]:
        if self._task is None:
            raise RuntimeError(f"Request {self.url!r} was never started")
        return self._task.__await__()
