"""Tests for heapscope.client — request chaining and exchange serialization."""

from __future__ import annotations

import asyncio

import pytest

from conftest import RecordingSink, ScriptedTransport, class_defs, histo, reply
from heapscope.client import HeapClient
from heapscope.core.chain import PendingRequestQueue, RequestChain
from heapscope.types import HandlerKind, NoticeKind, ProtocolError, TransportError


def make_client(config, responses, events=None):
    events = events if events is not None else []
    transport = ScriptedTransport(responses)
    transport.events = events
    client = HeapClient(config, sink=RecordingSink(events), transport=transport)
    return client, transport


class TestQueue:
    def test_fifo(self):
        q = PendingRequestQueue()
        q.push("a")
        q.push("b")
        assert len(q) == 2
        assert list(q) == ["a", "b"]
        assert q.pop() == "a"
        assert q.pop() == "b"
        assert q.pop() is None
        assert not q

    def test_then_appends_in_call_order(self):
        q = PendingRequestQueue()
        chain = RequestChain("first", q)
        assert chain.then("b") is chain
        chain.then("c")
        assert list(q) == ["b", "c"]


class TestRequests:
    @pytest.mark.asyncio
    async def test_await_chain_returns_response(self, config):
        client, _ = make_client(config, {"init": reply("InitUI")})
        response = await client.request("init")
        assert response.kind is HandlerKind.INIT_UI
        assert response.url == "init"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_query_url_is_encoded(self, config):
        client, _ = make_client(config, {})
        assert client.query_url("histo(x) from Object x") == "query?q=histo%28x%29+from+Object+x"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_init_runs_full_session(self, config):
        q = "query?q=histo%28x%29+from+Object+x"
        client, transport = make_client(config, {
            "init": reply("InitUI"),
            "classes": class_defs("X"),
            q: histo((1, 5, 50)),
        })
        client.init()
        errors = await client.join()

        assert errors == []
        assert transport.calls == ["init", "classes", q]
        assert client.sink.tables[0].triples() == [("X", 5, 50)]
        assert not client.queue
        await client.aclose()
        assert transport.closed

    @pytest.mark.asyncio
    async def test_chained_requests_run_strictly_in_order(self, config):
        events: list[str] = []
        client, transport = make_client(config, {
            "A": reply("InitUI"),
            "B": reply("Error", "from B"),
            "C": reply("Error", "from C"),
        }, events)
        transport.gate("A")

        client.request("A").then("B")
        client.request("A").then("C")
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        # First A is waiting on the server; nothing else was sent.
        assert transport.calls == ["A"]

        transport.release("A")
        errors = await client.join()

        assert errors == []
        assert transport.calls == ["A", "A", "B", "C"]
        # B is sent only after an A response was handled, C only after B's
        # handler produced its notice.
        assert events.index("fetch:B") > events.index("fetch:A")
        assert events.index("fetch:C") > events.index("notice:server_error")
        notices = [n.message for n in client.sink.notices]
        assert notices == ["Got an error: from B", "Got an error: from C"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_only_one_request_in_flight(self, config):
        in_flight = 0
        peak = 0

        class CountingTransport(ScriptedTransport):
            async def fetch(self, url):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return await super().fetch(url)

        transport = CountingTransport({u: reply("InitUI") for u in "ABCD"})
        client = HeapClient(config, transport=transport)
        for u in "ABCD":
            client.request(u)
        await client.join()
        assert peak == 1
        assert transport.calls == ["A", "B", "C", "D"]
        await client.aclose()


class TestFailures:
    @pytest.mark.asyncio
    async def test_protocol_error_still_fires_next(self, config):
        client, transport = make_client(config, {
            "bogus": reply("Bogus"),
            "next": reply("InitUI"),
        })
        chain = client.request("bogus").then("next")
        with pytest.raises(ProtocolError):
            await chain
        errors = await client.join()

        assert transport.calls == ["bogus", "next"]
        assert [type(e) for e in errors] == [ProtocolError]
        assert client.sink.notices[0].kind is NoticeKind.PROTOCOL_ERROR
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_stalls_chain(self, config):
        client, transport = make_client(config, {
            "broken": TransportError("HTTP 502: bad gateway", url="broken", status_code=502),
            "next": reply("InitUI"),
        })
        client.request("broken").then("next")
        errors = await client.join()

        assert transport.calls == ["broken"]
        assert list(client.queue) == ["next"]
        assert len(errors) == 1 and isinstance(errors[0], TransportError)
        notice = client.sink.notices[0]
        assert notice.kind is NoticeKind.TRANSPORT_ERROR
        assert notice.fatal
        await client.aclose()

    @pytest.mark.asyncio
    async def test_lookup_error_is_fatal_for_response(self, config):
        client, transport = make_client(config, {
            "histo": histo((3, 1, 1)),
            "next": reply("InitUI"),
        })
        client.request("histo").then("next")
        errors = await client.join()

        assert [type(e).__name__ for e in errors] == ["UnknownClassError"]
        assert client.sink.tabs == []
        assert transport.calls == ["histo", "next"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_join_resets_errors(self, config):
        client, _ = make_client(config, {"bogus": reply("Bogus")})
        client.request("bogus")
        assert len(await client.join()) == 1
        assert await client.join() == []
        assert client.idle
        await client.aclose()
