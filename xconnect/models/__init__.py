from .errors import BaseUrlMissingError, InvalidConfigError
from .exceptions import (
    BadRequestException,
    DataCorruptedError,
    DecodingError,
    DefaultException,
    ForbiddenException,
    HTTPStatusException,
    InterceptorError,
    InvalidURLError,
    KeyNotFoundError,
    NotFoundException,
    ServerException,
    TransportError,
    TypeMismatchError,
    UnauthorizedException,
    UnknownDecodingError,
    ValueNotFoundError,
    XConnectError,
    exception_for_status,
)
from .response import ResponseMetadata, ResponseSource, TypedResponse

__all__ = [
    "BadRequestException",
    "BaseUrlMissingError",
    "DataCorruptedError",
    "DecodingError",
    "DefaultException",
    "ForbiddenException",
    "HTTPStatusException",
    "InterceptorError",
    "InvalidConfigError",
    "InvalidURLError",
    "KeyNotFoundError",
    "NotFoundException",
    "ResponseMetadata",
    "ResponseSource",
    "ServerException",
    "TransportError",
    "TypeMismatchError",
    "TypedResponse",
    "UnauthorizedException",
    "UnknownDecodingError",
    "ValueNotFoundError",
    "XConnectError",
    "exception_for_status",
]
