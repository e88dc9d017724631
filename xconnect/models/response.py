from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

from httpx import Headers

from .._headers import HeaderTypes, header_pairs, to_headers
from .exceptions import exception_for_status

T = TypeVar("T")

HeaderInput = HeaderTypes


def header_items_of(headers: HeaderInput) -> tuple[tuple[str, str], ...]:
    if headers is None:
        return ()
    return header_pairs(to_headers(headers))


class ResponseSource(str, Enum):
    """Where the status code of a response came from."""

    NETWORK = "network"
    INTERCEPTOR = "interceptor"
    UNKNOWN_STATUS = "unknown_status"


@dataclass(frozen=True)
class ResponseMetadata:
    """Status and headers of a response, as seen by response interceptors.

    A status of ``None`` means the transport did not report one.
    """

    status_code: Optional[int] = None
    header_items: tuple[tuple[str, str], ...] = ()

    @classmethod
    def create(
        cls, status_code: Optional[int] = None, headers: HeaderInput = None
    ) -> "ResponseMetadata":
        return cls(status_code=status_code, header_items=header_items_of(headers))

    @property
    def headers(self) -> Headers:
        return to_headers(self.header_items)

    def with_status(self, status_code: Optional[int]) -> "ResponseMetadata":
        return ResponseMetadata(status_code, self.header_items)

    def with_headers(self, headers: HeaderInput) -> "ResponseMetadata":
        merged = self.headers
        merged.update(to_headers(headers))
        return ResponseMetadata(self.status_code, header_items_of(merged))


@dataclass(frozen=True)
class TypedResponse(Generic[T]):
    """The outcome of one dispatch: a status code and an optional payload.

    ``success`` only holds for statuses that came off the wire. The sentinel
    statuses used for interceptor short-circuits (298) and for transports
    that report no status (299) are never successful, even though they fall
    inside the 2xx range.
    """

    status_code: int
    payload: Optional[T] = None
    header_items: tuple[tuple[str, str], ...] = ()
    source: ResponseSource = ResponseSource.NETWORK
    url: Optional[str] = field(default=None, compare=False)
    content: Optional[bytes] = field(default=None, repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.source is ResponseSource.NETWORK and 200 <= self.status_code <= 299

    @property
    def headers(self) -> Headers:
        return to_headers(self.header_items)

    def raise_for_status(self) -> "TypedResponse[T]":
        """Raise the matching status exception for network statuses >= 400."""
        if self.source is ResponseSource.NETWORK and self.status_code >= 400:
            raise exception_for_status(
                self.status_code, url=self.url, content=self.content
            )
        return self
