"""Tests for heapscope.core.transport — HttpTransport over httpx."""

import httpx
import pytest

from heapscope.core.transport import HttpTransport
from heapscope.types import TransportError


def make_transport(handler) -> HttpTransport:
    client = httpx.AsyncClient(
        base_url="http://heap.test", transport=httpx.MockTransport(handler),
    )
    return HttpTransport(base_url="http://heap.test", client=client)


class TestHttpTransport:
    @pytest.mark.asyncio
    async def test_fetch_decodes_json(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"handler": "InitUI", "data": None})

        transport = make_transport(handler)
        payload = await transport.fetch("query?q=histo%28x%29")
        assert payload == {"handler": "InitUI", "data": None}
        assert seen == ["http://heap.test/query?q=histo%28x%29"]
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_non_2xx_is_transport_error(self):
        transport = make_transport(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(TransportError) as excinfo:
            await transport.fetch("init")
        assert excinfo.value.status_code == 503
        assert excinfo.value.url == "init"
        assert "down" in str(excinfo.value)
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_invalid_json_is_transport_error(self):
        transport = make_transport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(TransportError):
            await transport.fetch("init")
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler)
        with pytest.raises(TransportError) as excinfo:
            await transport.fetch("init")
        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        await transport.aclose()

    def test_base_url_trailing_slash_stripped(self):
        transport = HttpTransport(base_url="http://heap.test/", timeout=5.0)
        assert transport.base_url == "http://heap.test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [201, 203])
    async def test_any_2xx_with_json_is_accepted(self, status):
        transport = make_transport(
            lambda request: httpx.Response(status, json={"handler": "InitUI"}),
        )
        assert await transport.fetch("init") == {"handler": "InitUI"}
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_aclose_leaves_caller_client_open(self):
        client = httpx.AsyncClient(
            base_url="http://heap.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        transport = HttpTransport(base_url="http://heap.test", client=client)
        await transport.aclose()
        assert not client.is_closed
        assert await transport.fetch("init") == {}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_own_client(self):
        transport = HttpTransport(base_url="http://heap.test")
        await transport.aclose()
        assert transport._client.is_closed
