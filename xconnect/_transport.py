import logging
from typing import NamedTuple, Optional, Protocol, runtime_checkable

from httpx import AsyncClient, ConnectTimeout, Headers, HTTPError, Response
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from ._utils._request_spec import CachePolicy, RequestDescriptor
from ._utils._ssl_context import get_httpx_client_kwargs
from ._utils.constants import HEADER_CACHE_CONTROL
from .models.exceptions import TransportError

CACHE_CONTROL_DIRECTIVES = {
    CachePolicy.USE_PROTOCOL_CACHE_POLICY: None,
    CachePolicy.RELOAD_IGNORING_CACHE_DATA: "no-cache",
    CachePolicy.RETURN_CACHE_DATA_ELSE_LOAD: "max-stale",
    CachePolicy.RETURN_CACHE_DATA_DONT_LOAD: "only-if-cached",
}


class TransportResponse(NamedTuple):
    content: bytes
    status_code: Optional[int]
    headers: Headers


@runtime_checkable
class Transport(Protocol):
    """Sends one request and returns the raw response.

    Implementations must be safe to call concurrently.
    """

    async def send(self, request: RequestDescriptor) -> TransportResponse: ...

    async def aclose(self) -> None: ...


def is_retryable_exception(exception: BaseException) -> bool:
    # the request never left the machine, so any method is safe to resend
    return isinstance(exception, ConnectTimeout)


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Connection timeouts are retried with exponential backoff up to
    ``max_attempts`` times. Every other ``httpx`` failure is raised as a
    ``TransportError``.
    """

    def __init__(
        self,
        client: Optional[AsyncClient] = None,
        *,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        max_attempts: int = 3,
        wait: Optional[wait_base] = None,
    ) -> None:
        self._logger = logging.getLogger("xconnect")
        self._owns_client = client is None
        self._client = client or AsyncClient(
            **get_httpx_client_kwargs(timeout=timeout, verify_ssl=verify_ssl)
        )
        self._max_attempts = max_attempts
        self._wait = wait or wait_exponential(multiplier=1, min=1, max=10)

    @property
    def client(self) -> AsyncClient:
        return self._client

    def _request_headers(self, request: RequestDescriptor) -> Headers:
        headers = request.headers
        directive = (
            CACHE_CONTROL_DIRECTIVES.get(request.cache_policy)
            if request.cache_policy is not None
            else None
        )
        if directive is not None and HEADER_CACHE_CONTROL not in headers:
            headers[HEADER_CACHE_CONTROL] = directive
        return headers

    async def _send_with_retry(self, request: RequestDescriptor) -> Response:
        headers = self._request_headers(request)

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable_exception),
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            before_sleep=before_sleep_log(self._logger, logging.DEBUG),
            reraise=True,
        )
        return await retrying(
            self._client.request,
            request.method,
            request.url,
            content=request.content,
            headers=headers,
        )

    async def send(self, request: RequestDescriptor) -> TransportResponse:
        try:
            response = await self._send_with_retry(request)
        except HTTPError as e:
            raise TransportError(
                str(e) or type(e).__name__, method=request.method, url=request.url
            ) from e

        return TransportResponse(
            content=response.content,
            status_code=response.status_code,
            headers=response.headers,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
