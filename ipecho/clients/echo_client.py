from http import HTTPStatus
from types import MappingProxyType
from typing import Any

import anyio
import httpx

from ipecho.clients.base import BaseEchoClient
from ipecho.errors import EchoServiceError, EchoTimeoutError
from ipecho.models.common import ServiceTarget
from ipecho.models.request_models import AddressFamily

# Echo replies are a single address or a short trace document.
MAX_BODY_BYTES = 4096

# Binding the local side of the socket to a wildcard address of one family
# restricts name resolution and the connection itself to that family.
LOCAL_ADDRESSES = MappingProxyType(
    {
        AddressFamily.ipv4: "0.0.0.0",
        AddressFamily.ipv6: "::",
    }
)


class EchoClient(BaseEchoClient):
    """httpx client for plain-text echo services such as icanhazip.com.

    The outbound connection is always bound to the requested family. When the
    target has a `next_hop`, the connection goes to that literal address while
    the original hostname is kept for the Host header and TLS server name.
    """

    def __init__(self, timeout_seconds: float = 5.0, user_agent: str = "ipecho-address-probe/0.1.0") -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent

    async def fetch(self, target: ServiceTarget, family: AddressFamily) -> str:
        local_address = LOCAL_ADDRESSES.get(family)
        if local_address is None:
            raise EchoServiceError(f"Cannot probe an echo service for address family {family.value}")

        url, headers, extensions = self._build_request(target)
        transport = httpx.AsyncHTTPTransport(local_address=local_address)

        # httpx timeouts apply per connect/read step; the deadline bounds the whole exchange.
        try:
            with anyio.fail_after(self._timeout_seconds):
                async with httpx.AsyncClient(transport=transport, timeout=self._timeout_seconds) as client:
                    async with client.stream("GET", url, headers=headers, extensions=extensions) as response:
                        body = await self._read_body(response)
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise EchoTimeoutError(
                f"Echo service {target.url} did not answer within {self._timeout_seconds}s: {repr(exc)}"
            ) from exc
        except httpx.RequestError as exc:
            raise EchoServiceError(f"Request to echo service {target.url} failed: {repr(exc)}") from exc

        self._handle_http_errors(target, response.status_code, body)
        return body

    @staticmethod
    async def _read_body(response: httpx.Response) -> str:
        """Read at most MAX_BODY_BYTES of the response body."""
        received = bytearray()
        async for chunk in response.aiter_bytes():
            received += chunk
            if len(received) >= MAX_BODY_BYTES:
                break
        return bytes(received[:MAX_BODY_BYTES]).decode(response.encoding or "utf-8", errors="replace")

    def _build_request(self, target: ServiceTarget) -> tuple[httpx.URL, dict[str, str], dict[str, Any]]:
        """Return the URL to connect to, plus headers and extensions that pin the route."""
        url = httpx.URL(target.url)
        headers = {"User-Agent": self._user_agent}
        extensions: dict[str, Any] = {}

        if target.next_hop:
            headers["Host"] = url.netloc.decode("ascii")
            extensions["sni_hostname"] = url.host
            url = url.copy_with(host=target.next_hop)

        return url, headers, extensions

    @staticmethod
    def _handle_http_errors(target: ServiceTarget, status_code: int, body: str) -> None:
        """Anything other than a 2xx means the echo service gave no address."""
        if not HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            raise EchoServiceError(f"Echo service {target.url} returned HTTP {status_code}: {body[:200]}")
