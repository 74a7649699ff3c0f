"""
Tests for MiddlewareClient.
"""

import logging

import httpx
import pytest
import respx

from http_middleware import MiddlewareClient
from http_middleware.cache import InMemorySwrCache
from http_middleware.core.config import MiddlewareClientConfig
from http_middleware.core.exceptions import ConnectionError, TimeoutError
from http_middleware.core.logging import get_correlation_id
from http_middleware.middlewares.dedup_middleware import DedupMiddleware
from http_middleware.middlewares.logging_middleware import LoggingMiddleware
from http_middleware.middlewares.swr_middleware import SwrMiddleware

from helpers import BASE_URL, CountingBodies, RecordingMiddleware


def mock_transport(handler):
    calls = []

    def wrapped(request):
        calls.append(request)
        result = handler(request)
        if isinstance(result, Exception):
            raise result
        return result

    transport = httpx.MockTransport(wrapped)
    transport.calls = calls
    return transport


class TestRequests:

    @pytest.mark.asyncio
    async def test_get_json(self):
        with respx.mock(base_url=BASE_URL) as router:
            router.get("/users/1").respond(200, json={"id": 1})

            async with MiddlewareClient(base_url=BASE_URL) as client:
                response = await client.get("/users/1")

        assert response.status_code == 200
        assert response.json() == {"id": 1}

    @pytest.mark.asyncio
    async def test_default_headers_applied(self):
        transport = mock_transport(lambda r: httpx.Response(200))
        config = MiddlewareClientConfig.create(base_url=BASE_URL, headers={"X-Client": "tests"})

        async with MiddlewareClient(config=config, transport=transport) as client:
            await client.get("/data")

        assert transport.calls[0].headers["X-Client"] == "tests"

    @pytest.mark.asyncio
    async def test_post_with_json_body(self):
        transport = mock_transport(lambda r: httpx.Response(201, content=r.content))

        async with MiddlewareClient(base_url=BASE_URL, transport=transport) as client:
            response = await client.post("/items", json={"name": "x"})

        assert response.status_code == 201
        assert response.json() == {"name": "x"}

    @pytest.mark.asyncio
    async def test_stream_response(self):
        transport = mock_transport(lambda r: httpx.Response(200, stream=httpx.ByteStream(b"chunk")))

        async with MiddlewareClient(base_url=BASE_URL, transport=transport) as client:
            request = client.build_request("GET", "/file")
            response = await client.send(request, stream=True)
            body = b"".join([chunk async for chunk in response.aiter_bytes()])
            await response.aclose()

        assert body == b"chunk"

    @pytest.mark.asyncio
    async def test_connect_timeout_mapped(self):
        transport = mock_transport(lambda r: httpx.ConnectTimeout("timed out"))

        async with MiddlewareClient(base_url=BASE_URL, transport=transport) as client:
            with pytest.raises(TimeoutError) as exc_info:
                await client.get("/data")

        assert exc_info.value.timeout_type == "connect"
        assert exc_info.value.url == f"{BASE_URL}/data"

    @pytest.mark.asyncio
    async def test_connect_error_mapped(self):
        transport = mock_transport(lambda r: httpx.ConnectError("refused"))

        async with MiddlewareClient(base_url=BASE_URL, transport=transport) as client:
            with pytest.raises(ConnectionError):
                await client.get("/data")


class TestSwrThroughClient:

    @pytest.mark.asyncio
    async def test_hit_then_background_refresh(self):
        transport = mock_transport(CountingBodies())
        cache = InMemorySwrCache()

        async with MiddlewareClient([SwrMiddleware(cache=cache)], base_url=BASE_URL, transport=transport) as client:
            first = await client.get("/data")
            second = await client.get("/data")
            await client.wait_for_background()

            assert client.pending_background == 0

        assert first.text == "v1"
        assert second.text == "v1"
        assert len(transport.calls) == 2
        assert (await cache.get(f"GET:{BASE_URL}/data")).body == b"v2"

    @pytest.mark.asyncio
    async def test_post_is_not_cached(self):
        transport = mock_transport(CountingBodies())
        cache = InMemorySwrCache()

        async with MiddlewareClient([SwrMiddleware(cache=cache)], base_url=BASE_URL, transport=transport) as client:
            await client.post("/data", content=b"{}")
            await client.post("/data", content=b"{}")

        assert len(transport.calls) == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_background_error_reaches_every_middleware(self):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(200, content=b"ok")
            return httpx.ConnectError("refused")

        recorder = RecordingMiddleware("recorder")
        swr = SwrMiddleware(cache=InMemorySwrCache())

        async with MiddlewareClient([recorder, swr], base_url=BASE_URL, transport=mock_transport(handler)) as client:
            await client.get("/data")
            response = await client.get("/data")
            await client.wait_for_background()

        assert response.text == "ok"
        assert len(recorder.errors) == 1
        assert isinstance(recorder.errors[0], ConnectionError)

    @pytest.mark.asyncio
    async def test_close_waits_for_background(self):
        transport = mock_transport(CountingBodies())
        client = MiddlewareClient([SwrMiddleware(cache=InMemorySwrCache())], base_url=BASE_URL, transport=transport)

        await client.get("/data")
        await client.get("/data")
        await client.close()

        assert client.pending_background == 0
        assert len(transport.calls) == 2


class TestCorrelationId:

    @pytest.mark.asyncio
    async def test_bound_to_request_id_in_foreground_and_background(self):
        seen = []

        class Probe(RecordingMiddleware):
            async def process(self, context, next):
                seen.append((context.is_background, context.request_id, get_correlation_id()))
                return await next(context)

        transport = mock_transport(CountingBodies())
        middlewares = [Probe("probe"), SwrMiddleware(cache=InMemorySwrCache())]

        async with MiddlewareClient(middlewares, base_url=BASE_URL, transport=transport) as client:
            await client.get("/data")
            await client.get("/data")
            await client.wait_for_background()

        assert len(seen) == 3
        for _, request_id, correlation_id in seen:
            assert correlation_id == request_id
        assert seen[1][1] == seen[2][1]
        assert seen[2][0] is True
        assert get_correlation_id() is None


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes_owned_client(self):
        client = MiddlewareClient(base_url=BASE_URL, transport=mock_transport(lambda r: httpx.Response(200)))

        async with client:
            http_client = client._get_client()

        assert http_client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        http_client = httpx.AsyncClient(transport=mock_transport(lambda r: httpx.Response(200)))

        async with MiddlewareClient(client=http_client) as client:
            response = await client.get(f"{BASE_URL}/data")

        assert response.status_code == 200
        assert not http_client.is_closed
        await http_client.aclose()

    def test_middlewares_order(self):
        client = MiddlewareClient([
            LoggingMiddleware(),
            DedupMiddleware(),
            SwrMiddleware(cache=InMemorySwrCache()),
        ])

        assert client.get_middlewares_order() == ["LoggingMiddleware", "DedupMiddleware", "SwrMiddleware"]

    def test_properties(self):
        client = MiddlewareClient(base_url=f"{BASE_URL}/", headers={"Accept": "application/json"})

        assert client.base_url == BASE_URL
        assert client.headers["Accept"] == "application/json"
        assert client.middlewares == ()
        assert client.pending_background == 0

    @pytest.mark.asyncio
    async def test_structured_logging_configured_and_released(self, logging_config):
        config = MiddlewareClientConfig.create(base_url=BASE_URL, logging=logging_config)
        root = logging.getLogger("http_middleware")

        client = MiddlewareClient(config=config, transport=mock_transport(lambda r: httpx.Response(200)))
        assert root.propagate is False
        assert root.level == logging.DEBUG

        await client.close()
        assert root.propagate is True
