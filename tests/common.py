from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import anyio
import httpx

from ipecho.clients.base import BaseEchoClient
from ipecho.config import Settings
from ipecho.models.common import ServiceTarget
from ipecho.models.request_models import AddressFamily, PlatformMetadata, RequestContext


class MockResponse:
    """Streamed response double; `chunk_delay` simulates an echo service trickling its body."""

    encoding = "utf-8"

    def __init__(self, status_code: int, text: str = "", chunk_delay: float = 0.0, endless: bool = False) -> None:
        self.status_code = status_code
        self.text = text
        self._chunk_delay = chunk_delay
        self._endless = endless

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        if not self._chunk_delay and not self._endless:
            yield self.text.encode("utf-8")
            return
        while True:
            for byte in self.text.encode("utf-8"):
                if self._chunk_delay:
                    await anyio.sleep(self._chunk_delay)
                yield bytes([byte])
            if not self._endless:
                return


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient that records its calls."""

    def __init__(self, response: MockResponse, *args: Any, **kwargs: Any) -> None:
        self._response = response
        self.init_kwargs = kwargs
        self.calls: list[dict[str, Any]] = []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    @asynccontextmanager
    async def stream(self, method: str, url: Any, **kwargs: Any) -> AsyncIterator[MockResponse]:
        self.calls.append({"method": method, "url": url, **kwargs})
        yield self._response


class FailingAsyncClient:
    """Async client whose request raises the given httpx exception type.

    The target URL is provided at construction time so the raised exception
    carries a request, as real httpx errors do.
    """

    def __init__(self, url: str, exc_type: type[httpx.RequestError] = httpx.ConnectError, **kwargs: Any) -> None:
        self._url = url
        self._exc_type = exc_type

    async def __aenter__(self) -> "FailingAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    @asynccontextmanager
    async def stream(self, method: str, url: Any, **kwargs: Any) -> AsyncIterator[MockResponse]:
        request = httpx.Request(method, self._url)
        raise self._exc_type("Network failure", request=request)
        yield  # pragma: no cover


class FakeEchoClient(BaseEchoClient):
    """Echo client double returning a fixed body or raising a fixed error."""

    def __init__(self, body: str = "", exc: Exception | None = None) -> None:
        self._body = body
        self._exc = exc
        self.calls: list[tuple[ServiceTarget, AddressFamily]] = []

    async def fetch(self, target: ServiceTarget, family: AddressFamily) -> str:
        self.calls.append((target, family))
        if self._exc is not None:
            raise self._exc
        return self._body


class HangingEchoClient(BaseEchoClient):
    """Echo client that never answers and records whether its fetch was cancelled."""

    def __init__(self) -> None:
        self.started = False
        self.cancelled = False

    async def fetch(self, target: ServiceTarget, family: AddressFamily) -> str:
        self.started = True
        try:
            await anyio.sleep_forever()
        except anyio.get_cancelled_exc_class():
            self.cancelled = True
            raise
        return ""


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from any local `.env` file."""
    return Settings(_env_file=None, **overrides)


def make_context(hostname: str = "ipv4.example.com", path: str = "/", **metadata: Any) -> RequestContext:
    return RequestContext(hostname=hostname, path=path, metadata=PlatformMetadata(**metadata))


FULL_GEO_HEADERS = {
    "cf-connecting-ip": "203.0.113.7",
    "cf-ipcity": "Berlin",
    "cf-ipcountry": "DE",
    "cf-ipcontinent": "EU",
    "cf-region": "Land Berlin",
    "cf-iplatitude": "52.52437",
    "cf-iplongitude": "13.41053",
    "cf-timezone": "Europe/Berlin",
    "cf-ray": "8a1f2b3c4d5e6f70-TXL",
}
