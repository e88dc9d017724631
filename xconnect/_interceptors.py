"""Request and response interceptors.

An interceptor sees every request before it is sent and every response
after it arrives. Interceptors never mutate what they are given: they return
a new descriptor, a new body or new metadata, and the chain hands that to the
next interceptor in registration order.

A request interceptor may also return short-circuit bytes. The dispatch then
skips the transport and decodes those bytes as the response, tagged with the
reserved status 298. When several interceptors short-circuit, the first
payload wins; later interceptors still run but cannot replace it.
"""

import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Iterable, Iterator, NamedTuple, Optional, Union

from ._headers import HeaderTypes, header_pairs, to_headers
from ._utils._curl import to_curl
from ._utils._request_spec import CachePolicy, RequestDescriptor
from ._utils.constants import HEADER_AUTHORIZATION
from .models.response import ResponseMetadata

TokenProvider = Callable[[], Awaitable[str]]


class RequestOutcome(NamedTuple):
    request: RequestDescriptor
    short_circuit: Optional[bytes] = None


class ResponseOutcome(NamedTuple):
    body: bytes
    metadata: ResponseMetadata


class Interceptor:
    """Base class for interceptors. Both hooks pass everything through."""

    async def on_request(self, request: RequestDescriptor) -> RequestOutcome:
        return RequestOutcome(request)

    async def on_response(
        self, request: RequestDescriptor, metadata: ResponseMetadata, body: bytes
    ) -> ResponseOutcome:
        return ResponseOutcome(body, metadata)


class InterceptorChain:
    """An immutable, ordered sequence of interceptors."""

    def __init__(self, interceptors: Iterable[Interceptor] = ()) -> None:
        self._interceptors: tuple[Interceptor, ...] = tuple(interceptors)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    def __repr__(self) -> str:
        return f"InterceptorChain({list(self._interceptors)!r})"

    def extend(self, *interceptors: Interceptor) -> "InterceptorChain":
        return InterceptorChain(self._interceptors + interceptors)

    async def run_request(self, request: RequestDescriptor) -> RequestOutcome:
        short_circuit: Optional[bytes] = None
        for interceptor in self._interceptors:
            request, payload = await interceptor.on_request(request)
            if short_circuit is None and payload is not None:
                short_circuit = payload
        return RequestOutcome(request, short_circuit)

    async def run_response(
        self, request: RequestDescriptor, metadata: ResponseMetadata, body: bytes
    ) -> ResponseOutcome:
        for interceptor in self._interceptors:
            body, metadata = await interceptor.on_response(request, metadata, body)
        return ResponseOutcome(body, metadata)


class HeadersInterceptor(Interceptor):
    """Adds static headers to requests that do not already carry them."""

    def __init__(self, headers: HeaderTypes) -> None:
        self._header_items = header_pairs(to_headers(headers))

    async def on_request(self, request: RequestDescriptor) -> RequestOutcome:
        existing = request.headers
        missing = [(key, value) for key, value in self._header_items if key not in existing]
        if not missing:
            return RequestOutcome(request)
        return RequestOutcome(request.with_headers(missing))


class BearerAuthInterceptor(Interceptor):
    """Sets ``Authorization: Bearer <token>`` on every request.

    ``token`` is either a fixed string or a coroutine function that returns
    the current token, which lets callers refresh credentials on demand.
    """

    def __init__(self, token: Union[str, TokenProvider]) -> None:
        self._token = token

    async def _current_token(self) -> str:
        if isinstance(self._token, str):
            return self._token
        return await self._token()

    async def on_request(self, request: RequestDescriptor) -> RequestOutcome:
        token = await self._current_token()
        return RequestOutcome(
            request.with_headers({HEADER_AUTHORIZATION: f"Bearer {token}"})
        )


class LoggingInterceptor(Interceptor):
    def __init__(
        self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG
    ) -> None:
        self._logger = logger or logging.getLogger("xconnect")
        self._level = level

    async def on_request(self, request: RequestDescriptor) -> RequestOutcome:
        if self._logger.isEnabledFor(self._level):
            self._logger.log(self._level, f"Request: {request.method} {request.url}")
            self._logger.log(self._level, f"cURL: {to_curl(request)}")
        return RequestOutcome(request)

    async def on_response(
        self, request: RequestDescriptor, metadata: ResponseMetadata, body: bytes
    ) -> ResponseOutcome:
        self._logger.log(
            self._level,
            f"Response: {request.method} {request.url} -> {metadata.status_code} "
            f"({len(body)} bytes)",
        )
        return ResponseOutcome(body, metadata)


class MemoryCacheInterceptor(Interceptor):
    """Serves repeated ``GET`` requests from memory.

    Successful ``GET`` responses are stored by URL. A later ``GET`` for the
    same URL short-circuits with the stored body unless its cache policy is
    ``RELOAD_IGNORING_CACHE_DATA``. The oldest entry is evicted once
    ``max_entries`` is reached.
    """

    def __init__(self, max_entries: int = 128) -> None:
        self._max_entries = max_entries
        self._entries: OrderedDict[str, bytes] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    async def on_request(self, request: RequestDescriptor) -> RequestOutcome:
        if request.method != "GET":
            return RequestOutcome(request)
        if request.cache_policy is CachePolicy.RELOAD_IGNORING_CACHE_DATA:
            return RequestOutcome(request)
        return RequestOutcome(request, self._entries.get(request.url))

    async def on_response(
        self, request: RequestDescriptor, metadata: ResponseMetadata, body: bytes
    ) -> ResponseOutcome:
        status_code = metadata.status_code
        if request.method == "GET" and status_code is not None and 200 <= status_code <= 299:
            self._entries[request.url] = body
            self._entries.move_to_end(request.url)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
        return ResponseOutcome(body, metadata)
