from typing import ClassVar, Optional, Sequence, Union

CodingPath = Sequence[Union[str, int]]


class XConnectError(Exception):
    """Base class for every error raised by xconnect."""


class InvalidURLError(XConnectError):
    """Raised when a path and base URL do not resolve to an absolute URL."""

    def __init__(
        self, path: str, base_url: Optional[str] = None, reason: Optional[str] = None
    ) -> None:
        self.path = path
        self.base_url = base_url
        self.reason = reason or "cannot resolve to an absolute URL"
        super().__init__(
            f"Invalid URL: path {path!r} against base {base_url!r} ({self.reason})"
        )


class TransportError(XConnectError):
    """Opaque failure reported by the transport (network, timeout, TLS)."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        self.method = method
        self.url = url
        super().__init__(message)


class InterceptorError(XConnectError):
    """Base class for failures raised from inside an interceptor."""


class DecodingError(XConnectError):
    """Response bytes do not match the shape of the expected result type.

    Every variant carries the coding path to the offending value, the type
    that was expected there and the decoder's own description, so callers
    can build diagnostics without re-parsing the payload.
    """

    kind: ClassVar[str] = "unknown"
    title: ClassVar[str] = "Unknown Decoding Error"

    def __init__(
        self,
        debug_description: str,
        *,
        coding_path: CodingPath = (),
        expected_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.debug_description = debug_description
        self.coding_path = tuple(coding_path)
        self.expected_type = expected_type
        self.status_code = status_code
        super().__init__(f"{self.title} at {self.path_description}: {debug_description}")

    @property
    def path_description(self) -> str:
        if not self.coding_path:
            return "Root"
        return " → ".join(str(part) for part in self.coding_path)


class KeyNotFoundError(DecodingError):
    kind = "key_not_found"
    title = "Key Not Found Error"

    @property
    def key(self) -> Optional[str]:
        return str(self.coding_path[-1]) if self.coding_path else None


class TypeMismatchError(DecodingError):
    kind = "type_mismatch"
    title = "Type Mismatch Error"


class ValueNotFoundError(DecodingError):
    kind = "value_not_found"
    title = "Value Not Found Error"


class DataCorruptedError(DecodingError):
    kind = "data_corrupted"
    title = "Data Corrupted Error"


class UnknownDecodingError(DecodingError):
    kind = "unknown"
    title = "Unknown Decoding Error"


class HTTPStatusException(XConnectError):
    default_message: ClassVar[str] = "something went wrong"

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        *,
        url: Optional[str] = None,
        content: Optional[bytes] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message or self.default_message
        self.url = url
        self.content = content

        response_content = (
            content.decode("utf-8", errors="replace") if content else "No content"
        )
        enriched_message = (
            f"{self.message}"
            f"\nRequest URL: {url or 'Unknown'}"
            f"\nStatus Code: {status_code}"
            f"\nResponse Content: {response_content}"
        )
        super().__init__(enriched_message)


class BadRequestException(HTTPStatusException):
    default_message = "Bad Request"


class UnauthorizedException(HTTPStatusException):
    default_message = "Unauthorized request"


class ForbiddenException(HTTPStatusException):
    default_message = "Forbidden request"


class NotFoundException(HTTPStatusException):
    default_message = "data not found"


class ServerException(HTTPStatusException):
    default_message = "server error"


class DefaultException(HTTPStatusException):
    default_message = "something went wrong"


_STATUS_EXCEPTIONS: dict[int, type[HTTPStatusException]] = {
    400: BadRequestException,
    401: UnauthorizedException,
    403: ForbiddenException,
    404: NotFoundException,
}


def exception_for_status(
    status_code: int,
    message: Optional[str] = None,
    *,
    url: Optional[str] = None,
    content: Optional[bytes] = None,
) -> HTTPStatusException:
    """Pick the exception class that describes an HTTP error status."""
    if status_code in _STATUS_EXCEPTIONS:
        exception_class = _STATUS_EXCEPTIONS[status_code]
    elif 500 <= status_code < 600:
        exception_class = ServerException
    else:
        exception_class = DefaultException
    return exception_class(status_code, message, url=url, content=content)
