from typing import Optional

import pytest
from httpx import Headers

from xconnect import RequestDescriptor, TransportResponse, XConnect

BASE_URL = "https://api.example.com/v1/"


class FakeTransport:
    """In-memory transport that records requests and replays one response."""

    def __init__(
        self,
        content: bytes = b"",
        status_code: Optional[int] = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self.requests: list[RequestDescriptor] = []
        self.error: Optional[Exception] = None
        self.closed = False

    async def send(self, request: RequestDescriptor) -> TransportResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return TransportResponse(self.content, self.status_code, Headers(self.headers))

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(fake_transport: FakeTransport) -> XConnect:
    return XConnect(BASE_URL, transport=fake_transport)
