from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import anyio
import httpx
import pytest

from ipecho.clients.echo_client import MAX_BODY_BYTES, EchoClient
from ipecho.errors import EchoServiceError, EchoTimeoutError
from ipecho.models.common import ServiceTarget
from ipecho.models.request_models import AddressFamily
from tests.common import FailingAsyncClient, MockAsyncClient, MockResponse

IPV4_TARGET = ServiceTarget(url="https://ipv4.icanhazip.com")
IPV6_PINNED_TARGET = ServiceTarget(url="https://ipv6.icanhazip.com", next_hop="2606:4700::6812:1")


def install_fake_async_client(monkeypatch: pytest.MonkeyPatch, response: MockResponse) -> list[MockAsyncClient]:
    """Replace httpx.AsyncClient and return the list the created clients are appended to."""
    created: list[MockAsyncClient] = []

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        client = MockAsyncClient(response, *args, **kwargs)
        created.append(client)
        return client

    monkeypatch.setattr(httpx, "AsyncClient", _fake_client)
    return created


def record_transports(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    recorded: list[dict[str, Any]] = []
    real_transport: Callable[..., httpx.AsyncHTTPTransport] = httpx.AsyncHTTPTransport

    def _transport(**kwargs: Any) -> httpx.AsyncHTTPTransport:
        recorded.append(kwargs)
        return real_transport(**kwargs)

    monkeypatch.setattr(httpx, "AsyncHTTPTransport", _transport)
    return recorded


@pytest.mark.asyncio
async def test_fetch_returns_body_and_sends_user_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    created = install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="203.0.113.7\n"))

    client = EchoClient(timeout_seconds=2.5, user_agent="test-agent/1.0")
    body = await client.fetch(IPV4_TARGET, AddressFamily.ipv4)

    assert body == "203.0.113.7\n"
    call = created[0].calls[0]
    assert call["headers"]["User-Agent"] == "test-agent/1.0"
    assert "Host" not in call["headers"]
    assert call["extensions"] == {}
    assert call["url"].host == "ipv4.icanhazip.com"
    assert created[0].init_kwargs["timeout"] == 2.5


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("family", "local_address"),
    [(AddressFamily.ipv4, "0.0.0.0"), (AddressFamily.ipv6, "::")],
)
async def test_fetch_binds_socket_to_requested_family(
    monkeypatch: pytest.MonkeyPatch, family: AddressFamily, local_address: str
) -> None:
    install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="ok"))
    transports = record_transports(monkeypatch)

    await EchoClient().fetch(IPV4_TARGET, family)

    assert transports == [{"local_address": local_address}]


@pytest.mark.asyncio
async def test_fetch_pins_connection_to_next_hop(monkeypatch: pytest.MonkeyPatch) -> None:
    """The literal next hop replaces the hostname; Host header and SNI keep the original name."""
    created = install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="2001:db8::7"))

    await EchoClient().fetch(IPV6_PINNED_TARGET, AddressFamily.ipv6)

    call = created[0].calls[0]
    assert call["url"].host == "2606:4700::6812:1"
    assert call["url"].scheme == "https"
    assert call["headers"]["Host"] == "ipv6.icanhazip.com"
    assert call["extensions"] == {"sni_hostname": "ipv6.icanhazip.com"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code",
    [HTTPStatus.NOT_FOUND, HTTPStatus.TOO_MANY_REQUESTS, HTTPStatus.INTERNAL_SERVER_ERROR, HTTPStatus.BAD_GATEWAY],
)
async def test_fetch_non_success_status_raises_echo_service_error(
    monkeypatch: pytest.MonkeyPatch, status_code: HTTPStatus
) -> None:
    install_fake_async_client(monkeypatch, MockResponse(status_code, text="error"))

    with pytest.raises(EchoServiceError):
        await EchoClient().fetch(IPV4_TARGET, AddressFamily.ipv4)


@pytest.mark.asyncio
async def test_fetch_network_failure_raises_echo_service_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        httpx, "AsyncClient", lambda *args, **kwargs: FailingAsyncClient("https://ipv6.icanhazip.com", **kwargs)
    )

    with pytest.raises(EchoServiceError) as exc_info:
        await EchoClient().fetch(IPV6_PINNED_TARGET, AddressFamily.ipv6)

    assert not isinstance(exc_info.value, EchoTimeoutError)


@pytest.mark.asyncio
async def test_fetch_timeout_raises_echo_timeout_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda *args, **kwargs: FailingAsyncClient("https://ipv6.icanhazip.com", httpx.ConnectTimeout, **kwargs),
    )

    with pytest.raises(EchoTimeoutError):
        await EchoClient().fetch(IPV6_PINNED_TARGET, AddressFamily.ipv6)


@pytest.mark.asyncio
async def test_fetch_rejects_unspecified_family() -> None:
    with pytest.raises(EchoServiceError):
        await EchoClient().fetch(IPV4_TARGET, AddressFamily.unspecified)


@pytest.mark.asyncio
async def test_fetch_slow_body_is_bounded_by_total_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every chunk arrives well within the per-read timeout, but the exchange as a whole does not."""
    install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="1", chunk_delay=0.05, endless=True))

    with anyio.fail_after(2):
        with pytest.raises(EchoTimeoutError):
            await EchoClient(timeout_seconds=0.3).fetch(IPV4_TARGET, AddressFamily.ipv4)


@pytest.mark.asyncio
async def test_fetch_caps_oversized_body(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="a" * (MAX_BODY_BYTES * 3)))

    body = await EchoClient().fetch(IPV4_TARGET, AddressFamily.ipv4)

    assert body == "a" * MAX_BODY_BYTES


@pytest.mark.asyncio
async def test_fetch_stops_reading_endless_body_at_cap(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_async_client(monkeypatch, MockResponse(HTTPStatus.OK, text="203.0.113.7\n", endless=True))

    body = await EchoClient().fetch(IPV4_TARGET, AddressFamily.ipv4)

    assert len(body) == MAX_BODY_BYTES
    assert body.startswith("203.0.113.7\n")
