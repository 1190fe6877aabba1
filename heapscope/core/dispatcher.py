"""ResponseDispatcher: closed kind -> handler dispatch plus queue draining."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..types import (
    ClassDef,
    HandlerKind,
    Notice,
    NoticeKind,
    PresentationSink,
    ProtocolError,
    RenderConfig,
    Response,
    Sample,
    UnknownClassError,
)
from .aggregation import AggregationNode
from .chain import PendingRequestQueue
from .registry import ClassRegistry

logger = logging.getLogger(__name__)


class ResponseDispatcher:
    """Runs the handler for a response's declared kind, then fires the next
    queued request.

    The handler set is fixed: ``Error``, ``InitUI``, ``ClassDefs`` and
    ``Histo``. Anything else raises ``ProtocolError``.

    The queue is drained once per dispatched response, whether the handler
    returned normally or raised. Responses that never reached ``dispatch``
    (transport failures) leave the queue untouched.
    """

    def __init__(
        self,
        registry: ClassRegistry,
        sink: PresentationSink,
        queue: PendingRequestQueue,
        fire: Callable[[str], Any],
        render_config: RenderConfig | None = None,
    ) -> None:
        self.registry = registry
        self.sink = sink
        self.queue = queue
        self._fire = fire
        self._render = render_config or RenderConfig()
        self._handlers: dict[HandlerKind, Callable[[Any], None]] = {
            HandlerKind.ERROR: self._on_error,
            HandlerKind.INIT_UI: self._on_init_ui,
            HandlerKind.CLASS_DEFS: self._on_class_defs,
            HandlerKind.HISTO: self._on_histo,
        }

    def dispatch(self, response: Response | dict, url: str = "") -> Response:
        """Handle one response. Returns the decoded response."""
        try:
            if not isinstance(response, Response):
                response = Response.from_payload(response, url=url)
            logger.debug("Dispatching %s response from %s", response.kind.value, response.url or "?")
            self._handlers[response.kind](response.data)
            return response
        except ProtocolError as e:
            logger.error("Protocol error: %s", e)
            self.sink.notify(Notice(NoticeKind.PROTOCOL_ERROR, f"Protocol mismatch: {e}"))
            raise
        except UnknownClassError as e:
            logger.error("Histogram references unregistered class: %s", e)
            self.sink.notify(Notice(NoticeKind.INVARIANT_ERROR, str(e), fatal=True))
            raise
        finally:
            self._drain()

    def _drain(self) -> None:
        next_url = self.queue.pop()
        if next_url is not None:
            logger.debug("Firing chained request %s (%d still queued)", next_url, len(self.queue))
            self._fire(next_url)

    # -- handlers ------------------------------------------------------------

    def _on_error(self, data: Any) -> None:
        message = "" if data is None else str(data)
        logger.warning("Server reported an error: %s", message)
        self.sink.notify(Notice(NoticeKind.SERVER_ERROR, f"Got an error: {message}"))

    def _on_init_ui(self, data: Any) -> None:
        logger.info("Session reset, dropping %d class definitions", len(self.registry))
        self.registry.clear()

    def _on_class_defs(self, data: Any) -> None:
        entries = [ClassDef.from_payload(raw) for raw in _as_list(data, HandlerKind.CLASS_DEFS)]
        for class_def in entries:
            self.registry.register(class_def)
        logger.debug("Registered %d class definitions", len(entries))

    def _on_histo(self, data: Any) -> None:
        root = AggregationNode(is_root=True)
        for raw in _as_list(data, HandlerKind.HISTO):
            sample = Sample.from_payload(raw)
            class_def = self.registry.get(sample.class_id)
            root.add(class_def, sample.count, sample.byte_size)
        table = root.render(sort_by=self._render.sort_by, tab_title=self._render.tab_title)
        logger.info(
            "Histogram: %d objects, %d bytes, %d top-level packages",
            root.count, root.byte_size, len(root.children),
        )
        self.sink.add_tab(table.tab, table)


def _as_list(data: Any, kind: HandlerKind) -> list:
    if data is None:
        return []
    if not isinstance(data, (list, tuple)):
        raise ProtocolError(
            f"{kind.value} payload must be a list, got {type(data).__name__}",
            kind=kind.value,
        )
    return list(data)
