import copy
import logging
from os import environ as env
from typing import Any, Iterable, Mapping, Optional, Union

from dotenv import load_dotenv
from httpx import Headers
from pydantic import ValidationError

from ._config import Config
from ._forms import Dto, MultipartDto
from ._headers import HeaderTypes, header_pairs, to_headers
from ._interceptors import Interceptor, InterceptorChain
from ._transport import HttpxTransport, Transport
from ._utils import (
    CachePolicy,
    ErrorReporter,
    RequestDescriptor,
    XConnectUrl,
    build_multipart_request,
    build_request,
    decode_response,
    header_user_agent,
    setup_logging,
)
from ._utils._request_spec import merge_header_items
from ._utils.constants import (
    APPLICATION_JSON,
    DEFAULT_TIMEOUT,
    ENV_BASE_URL,
    ENV_TIMEOUT,
    HEADER_CONTENT_TYPE,
    STATUS_SERVED_FROM_INTERCEPTOR,
    STATUS_UNKNOWN,
)
from .models.errors import BaseUrlMissingError, InvalidConfigError
from .models.exceptions import DecodingError
from .models.response import ResponseMetadata, ResponseSource, TypedResponse
from .tracing import traced

load_dotenv()

Body = Union[bytes, Dto, None]
QueryTypes = Optional[Mapping[str, str]]


def _span_attributes(
    client: "XConnect", request: RequestDescriptor, response_type: Any = bytes
) -> dict[str, Any]:
    return {"http.request.method": request.method, "url.full": request.url}


class XConnect:
    """Asynchronous HTTP client that dispatches typed requests.

    Every call builds a request descriptor, runs it through the interceptor
    chain, sends it over the transport (unless an interceptor short-circuits)
    and decodes the response body into ``response_type``.

    Examples:
        ```python
        from xconnect import XConnect

        async with XConnect("https://api.example.com/") as client:
            response = await client.get("users", response_type=list[User])
            if response.success:
                print(response.payload)
        ```

    Args:
        base_url (Optional[str]): Base URL for relative paths. Falls back to
            the ``XCONNECT_BASE_URL`` environment variable.
        transport (Optional[Transport]): Sends requests. Defaults to an
            ``HttpxTransport`` owned, and closed, by this client.
        interceptors (Iterable[Interceptor]): Applied in registration order.
        headers: Default headers sent with every request. Caller headers win.
        timeout (Optional[float]): Timeout for the default transport.
        verify_ssl (Optional[bool]): TLS verification for the default transport.
        debug (bool): Configure the ``xconnect`` logger at DEBUG level.
        logger (Optional[logging.Logger]): Receives diagnostics. Defaults to
            the ``xconnect`` logger.

    Raises:
        BaseUrlMissingError: If no base URL is given or configured.
        InvalidURLError: If the base URL is not absolute.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[Transport] = None,
        interceptors: Iterable[Interceptor] = (),
        headers: HeaderTypes = None,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        base_url_value = base_url or env.get(ENV_BASE_URL)
        timeout_value = timeout if timeout is not None else env.get(ENV_TIMEOUT)

        try:
            self._config = Config(
                base_url=base_url_value,  # type: ignore
                timeout=timeout_value if timeout_value is not None else DEFAULT_TIMEOUT,
                verify_ssl=verify_ssl,
            )
        except ValidationError as e:
            for error in e.errors():
                if error["loc"] and error["loc"][0] == "base_url":
                    raise BaseUrlMissingError() from e
            raise InvalidConfigError(str(e)) from e

        if debug:
            setup_logging(debug)
        self._logger = logger or logging.getLogger("xconnect")
        self._error_reporter = ErrorReporter(self._logger, level=logging.DEBUG)

        self._url = XConnectUrl(self._config.base_url)
        self._url.resolve("")

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            timeout=self._config.timeout, verify_ssl=self._config.verify_ssl
        )
        self._interceptors = (
            interceptors
            if isinstance(interceptors, InterceptorChain)
            else InterceptorChain(interceptors)
        )
        self._custom_header_items = header_pairs(to_headers(headers))

    async def __aenter__(self) -> "XConnect":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def base_url(self) -> str:
        return str(self._url)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def interceptors(self) -> InterceptorChain:
        return self._interceptors

    @property
    def default_headers(self) -> Headers:
        return to_headers(
            merge_header_items(
                header_pairs(to_headers(header_user_agent())),
                self._custom_header_items,
            )
        )

    def with_interceptors(self, *interceptors: Interceptor) -> "XConnect":
        """Return a client that shares this transport and adds ``interceptors``.

        The new client does not own the transport; closing it is left to
        this client.
        """
        clone = copy.copy(self)
        clone._interceptors = self._interceptors.extend(*interceptors)
        clone._owns_transport = False
        return clone

    def build_request(
        self,
        method: str,
        path: str,
        body: Body = None,
        *,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> RequestDescriptor:
        """Build the descriptor a call would send, without sending it.

        ``bytes`` bodies are attached verbatim. A ``MultipartDto`` is encoded
        as ``multipart/form-data``, and any other ``Dto`` as JSON with a
        default ``Content-Type: application/json``.
        """
        header_items = merge_header_items(
            header_pairs(self.default_headers), headers
        )

        if isinstance(body, MultipartDto):
            return build_multipart_request(
                path,
                self._url,
                method=method,
                query=query,
                body=body,
                headers=header_items,
                cache_policy=cache_policy,
            )

        content: Optional[bytes]
        if isinstance(body, Dto):
            content = body.to_data()
            if content is not None and not any(
                key.lower() == HEADER_CONTENT_TYPE.lower() for key, _ in header_items
            ):
                header_items = merge_header_items(
                    header_items, {HEADER_CONTENT_TYPE: APPLICATION_JSON}
                )
        else:
            content = body

        return build_request(
            path,
            self._url,
            method=method,
            query=query,
            body=content,
            headers=header_items,
            cache_policy=cache_policy,
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Body = None,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        descriptor = self.build_request(
            method,
            path,
            body,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )
        return await self.send(descriptor, response_type)

    async def get(
        self,
        path: str,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        return await self.request(
            "GET",
            path,
            response_type=response_type,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )

    async def post(
        self,
        path: str,
        body: Body = None,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        return await self.request(
            "POST",
            path,
            body,
            response_type=response_type,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )

    async def put(
        self,
        path: str,
        body: Body = None,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        return await self.request(
            "PUT",
            path,
            body,
            response_type=response_type,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )

    async def patch(
        self,
        path: str,
        body: Body = None,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        return await self.request(
            "PATCH",
            path,
            body,
            response_type=response_type,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )

    async def delete(
        self,
        path: str,
        body: Body = None,
        *,
        response_type: Any = bytes,
        headers: HeaderTypes = None,
        query: QueryTypes = None,
        cache_policy: Optional[CachePolicy] = None,
    ) -> TypedResponse[Any]:
        return await self.request(
            "DELETE",
            path,
            body,
            response_type=response_type,
            headers=headers,
            query=query,
            cache_policy=cache_policy,
        )

    @traced(name="xconnect_send", run_type="http", attributes=_span_attributes)
    async def send(
        self, request: RequestDescriptor, response_type: Any = bytes
    ) -> TypedResponse[Any]:
        """Dispatch a prepared descriptor and decode the response.

        Raises:
            DecodingError: If the body does not match ``response_type``.
            TransportError: If the transport fails.
        """
        outcome = await self._interceptors.run_request(request)

        if outcome.short_circuit is not None:
            self._logger.debug(
                f"Served from interceptor: {outcome.request.method} {outcome.request.url}"
            )
            return self._decode(
                outcome.short_circuit,
                STATUS_SERVED_FROM_INTERCEPTOR,
                response_type,
                metadata=ResponseMetadata(),
                source=ResponseSource.INTERCEPTOR,
                url=outcome.request.url,
            )

        self._logger.debug(f"Request: {outcome.request.method} {outcome.request.url}")
        raw = await self._transport.send(outcome.request)

        body, metadata = await self._interceptors.run_response(
            request,
            ResponseMetadata.create(raw.status_code, raw.headers),
            raw.content,
        )

        if metadata.status_code is None:
            status_code, source = STATUS_UNKNOWN, ResponseSource.UNKNOWN_STATUS
        else:
            status_code, source = metadata.status_code, ResponseSource.NETWORK

        return self._decode(
            body,
            status_code,
            response_type,
            metadata=metadata,
            source=source,
            url=outcome.request.url,
        )

    def _decode(
        self,
        data: bytes,
        status_code: int,
        response_type: Any,
        *,
        metadata: ResponseMetadata,
        source: ResponseSource,
        url: str,
    ) -> TypedResponse[Any]:
        try:
            return decode_response(
                data,
                status_code,
                response_type,
                headers=metadata.headers,
                source=source,
                url=url,
            )
        except DecodingError as e:
            self._error_reporter.report(e)
            raise
