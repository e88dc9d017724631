"""Tests for the httpx-backed transport."""

import httpx
import pytest
from tenacity import wait_none

from xconnect import CachePolicy, HttpxTransport, RequestDescriptor, Transport
from xconnect.models import TransportError

pytestmark = pytest.mark.anyio

URL = "https://api.example.com/v1/items"


def make_transport(handler, **kwargs) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client, wait=wait_none(), **kwargs)


class TestHttpxTransport:
    """Tests for HttpxTransport."""

    async def test_send(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, content=b"created", headers={"X-Id": "7"})

        transport = make_transport(handler)

        response = await transport.send(
            RequestDescriptor("POST", URL, (("X-Trace", "1"),), b"payload")
        )

        assert response.status_code == 201
        assert response.content == b"created"
        assert response.headers["x-id"] == "7"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == URL
        assert seen[0].content == b"payload"
        assert seen[0].headers["X-Trace"] == "1"

    async def test_non_ascii_header_is_sent_as_utf8(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await make_transport(handler).send(
            RequestDescriptor("GET", URL, (("X-Name", "café"),))
        )

        assert (b"X-Name", "café".encode("utf-8")) in seen[0].headers.raw

    @pytest.mark.parametrize(
        ("cache_policy", "expected"),
        [
            (CachePolicy.RELOAD_IGNORING_CACHE_DATA, "no-cache"),
            (CachePolicy.RETURN_CACHE_DATA_ELSE_LOAD, "max-stale"),
            (CachePolicy.RETURN_CACHE_DATA_DONT_LOAD, "only-if-cached"),
            (CachePolicy.USE_PROTOCOL_CACHE_POLICY, None),
            (None, None),
        ],
    )
    async def test_cache_policy_header(self, cache_policy, expected):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await make_transport(handler).send(
            RequestDescriptor("GET", URL, cache_policy=cache_policy)
        )

        assert seen[0].headers.get("Cache-Control") == expected

    async def test_explicit_cache_control_is_kept(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await make_transport(handler).send(
            RequestDescriptor(
                "GET",
                URL,
                (("cache-control", "max-age=0"),),
                cache_policy=CachePolicy.RELOAD_IGNORING_CACHE_DATA,
            )
        )

        assert seen[0].headers["Cache-Control"] == "max-age=0"

    async def test_http_errors_become_transport_errors(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).send(RequestDescriptor("GET", URL))

        assert exc_info.value.method == "GET"
        assert exc_info.value.url == URL
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_connect_timeouts_are_retried(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(200, content=b"ok")

        response = await make_transport(handler).send(RequestDescriptor("GET", URL))

        assert calls == 3
        assert response.content == b"ok"

    async def test_retries_are_bounded(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TransportError):
            await make_transport(handler, max_attempts=2).send(RequestDescriptor("GET", URL))

        assert calls == 2

    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        await HttpxTransport(client).aclose()

        assert not client.is_closed
        await client.aclose()

    async def test_owned_client_is_closed(self):
        transport = HttpxTransport(timeout=5.0)

        await transport.aclose()

        assert transport.client.is_closed

    def test_satisfies_transport_protocol(self):
        assert isinstance(HttpxTransport(httpx.AsyncClient()), Transport)
