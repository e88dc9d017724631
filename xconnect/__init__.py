"""XConnect: an asynchronous HTTP client for typed APIs.

This package builds requests from structured records, sends them through a
chain of interceptors and a pluggable transport, and decodes responses into
typed results.


The main entry point is the XConnect class, which exposes one coroutine per
HTTP verb.

Example:
```python
    # Optionally set the base URL through the environment:
    # export XCONNECT_BASE_URL="https://api.example.com/v1/"

    from xconnect import XConnect

    async with XConnect() as client:
        response = await client.get("users/42", response_type=User)
        user = response.payload
```
"""

from ._config import Config
from ._forms import Dto, EasyMultipart, MultipartDto, MultipartFile
from ._interceptors import (
    BearerAuthInterceptor,
    HeadersInterceptor,
    Interceptor,
    InterceptorChain,
    LoggingInterceptor,
    MemoryCacheInterceptor,
    RequestOutcome,
    ResponseOutcome,
)
from ._transport import HttpxTransport, Transport, TransportResponse
from ._utils import CachePolicy, RequestDescriptor, to_curl
from ._xconnect import XConnect
from .models import (
    DecodingError,
    HTTPStatusException,
    InvalidURLError,
    ResponseMetadata,
    ResponseSource,
    TransportError,
    TypedResponse,
    XConnectError,
)

__all__ = [
    "BearerAuthInterceptor",
    "CachePolicy",
    "Config",
    "DecodingError",
    "Dto",
    "EasyMultipart",
    "HTTPStatusException",
    "HeadersInterceptor",
    "HttpxTransport",
    "Interceptor",
    "InterceptorChain",
    "InvalidURLError",
    "LoggingInterceptor",
    "MemoryCacheInterceptor",
    "MultipartDto",
    "MultipartFile",
    "RequestDescriptor",
    "RequestOutcome",
    "ResponseMetadata",
    "ResponseOutcome",
    "ResponseSource",
    "Transport",
    "TransportError",
    "TransportResponse",
    "TypedResponse",
    "XConnect",
    "XConnectError",
    "to_curl",
]
