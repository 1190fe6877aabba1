"""Shared fixtures for heapscope tests."""

from __future__ import annotations

import asyncio

import pytest

from heapscope.config import load_config
from heapscope.sinks import MemorySink
from heapscope.types import ClassDef, HeapscopeConfig


def reply(handler: str, data=None) -> dict:
    return {"handler": handler, "data": data}


def class_defs(*names: str) -> dict:
    """ClassDefs response registering *names* with ids 1, 2, ..."""
    return reply("ClassDefs", [{"id": i, "name": n} for i, n in enumerate(names, 1)])


def histo(*entries: tuple[int, int, int]) -> dict:
    return reply("Histo", [{"id": i, "count": c, "nbytes": b} for i, c, b in entries])


class ScriptedTransport:
    """Fake transport answering from a url -> payload map.

    A payload that is an exception instance is raised instead. ``gate(url)``
    holds the response for *url* until ``release(url)`` is called.
    ``events`` records ``fetch:<url>`` when a fetch starts.
    """

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.events: list[str] = []
        self.calls: list[str] = []
        self.closed = False
        self._gates: dict[str, asyncio.Event] = {}

    def gate(self, url: str) -> None:
        self._gates[url] = asyncio.Event()

    def release(self, url: str) -> None:
        self._gates[url].set()

    async def fetch(self, url: str):
        self.calls.append(url)
        self.events.append(f"fetch:{url}")
        gate = self._gates.get(url)
        if gate is not None:
            await gate.wait()
        payload = self.responses[url]
        if isinstance(payload, Exception):
            raise payload
        return payload

    async def aclose(self) -> None:
        self.closed = True


class RecordingSink(MemorySink):
    """MemorySink that also logs tab/notice events into a shared list."""

    def __init__(self, events: list[str]):
        super().__init__()
        self._events = events

    def add_tab(self, name, content):
        super().add_tab(name, content)
        self._events.append(f"tab:{name}")

    def notify(self, notice):
        super().notify(notice)
        self._events.append(f"notice:{notice.kind.value}")


@pytest.fixture
def config() -> HeapscopeConfig:
    return load_config(config_dict={
        "server": {"base_url": "http://heap.test"},
    })


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def sample_classes() -> list[ClassDef]:
    return [
        ClassDef(1, "a.b.Foo"),
        ClassDef(2, "a.b.Bar"),
        ClassDef(3, "a.c.Baz"),
    ]
