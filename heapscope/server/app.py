"""Snapshot server: answers the heapscope protocol from a fixed snapshot.

A development fixture, not a query engine. Any query that starts with
``histo`` returns the snapshot's histogram; everything else gets a server
``Error`` response.

Usage:
    heapscope serve snapshot.yaml --port 7070
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..types import HandlerKind
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


def _reply(kind: HandlerKind, data=None) -> JSONResponse:
    return JSONResponse({"handler": kind.value, "data": data})


def create_app(snapshot: Snapshot) -> FastAPI:
    app = FastAPI(title="heapscope snapshot server")
    app.state.snapshot = snapshot

    @app.get("/init")
    async def init() -> JSONResponse:
        return _reply(HandlerKind.INIT_UI)

    @app.get("/classes")
    async def classes() -> JSONResponse:
        return _reply(HandlerKind.CLASS_DEFS, app.state.snapshot.class_defs_payload())

    @app.get("/query")
    async def query(q: str = "") -> JSONResponse:
        logger.info("Query: %s", q)
        if not q.strip().startswith("histo"):
            return _reply(HandlerKind.ERROR, f"Unsupported query: {q}")
        return _reply(HandlerKind.HISTO, app.state.snapshot.histo_payload())

    return app
