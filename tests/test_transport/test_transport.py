"""Tests for the httpx-backed transports."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from resourcecache.exceptions import NotFoundError, TransportError
from resourcecache.models import RequestConfig
from resourcecache.transport import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
)

URL = "https://cfg.example.com/flags.json"


def _transport_from_handler(handler) -> httpx.MockTransport:
    """Create an httpx.MockTransport from a handler function."""
    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Blocking transport
# ---------------------------------------------------------------------------


class TestHttpxTransport:
    def test_returns_body_bytes(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert str(request.url) == URL
            return httpx.Response(200, content=b'{"n": 1}')

        transport = HttpxTransport(transport=_transport_from_handler(handler))
        assert transport.fetch(URL) == b'{"n": 1}'
        transport.close()

    def test_sends_configured_headers(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers.get("x-token") == "abc"
            return httpx.Response(200, content=b"{}")

        config = RequestConfig(headers={"X-Token": "abc"})
        transport = HttpxTransport(config, transport=_transport_from_handler(handler))
        assert transport.fetch(URL) == b"{}"

    @pytest.mark.parametrize("status", [404, 410])
    def test_missing_resource_is_not_found(self, status: int) -> None:
        transport = HttpxTransport(
            transport=_transport_from_handler(lambda request: httpx.Response(status))
        )
        with pytest.raises(NotFoundError, match=f"HTTP {status}") as exc_info:
            transport.fetch(URL)
        assert exc_info.value.location == URL

    @pytest.mark.parametrize("status", [301, 400, 401, 500, 503])
    def test_other_statuses_are_transport_errors(self, status: int) -> None:
        transport = HttpxTransport(
            RequestConfig(follow_redirects=False),
            transport=_transport_from_handler(lambda request: httpx.Response(status)),
        )
        with pytest.raises(TransportError, match=f"HTTP {status}"):
            transport.fetch(URL)

    def test_network_error_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(transport=_transport_from_handler(handler))
        with pytest.raises(TransportError, match="Fetch failed") as exc_info:
            transport.fetch(URL)
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_injected_client_is_not_closed(self) -> None:
        client = httpx.Client(
            transport=_transport_from_handler(lambda request: httpx.Response(200, content=b"1"))
        )
        transport = HttpxTransport(client=client)
        transport.close()
        assert client.is_closed is False
        assert transport.fetch(URL) == b"1"
        client.close()

    def test_own_client_is_closed(self) -> None:
        transport = HttpxTransport(
            transport=_transport_from_handler(lambda request: httpx.Response(200))
        )
        transport.close()
        assert transport._client.is_closed is True

    def test_default_timeout_is_unbounded(self) -> None:
        transport = HttpxTransport()
        try:
            assert transport._client.timeout == httpx.Timeout(None)
        finally:
            transport.close()

    def test_configured_timeout(self) -> None:
        transport = HttpxTransport(RequestConfig(timeout=2.5))
        try:
            assert transport._client.timeout == httpx.Timeout(2.5)
        finally:
            transport.close()

    def test_satisfies_protocol(self) -> None:
        transport = HttpxTransport()
        try:
            assert isinstance(transport, Transport)
        finally:
            transport.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------


class TestAsyncHttpxTransport:
    def test_returns_body_bytes(self) -> None:
        async def run() -> bytes:
            transport = AsyncHttpxTransport(
                transport=_transport_from_handler(
                    lambda request: httpx.Response(200, content=b"a: 1\n")
                )
            )
            try:
                return await transport.fetch(URL)
            finally:
                await transport.aclose()

        assert asyncio.run(run()) == b"a: 1\n"

    def test_not_found(self) -> None:
        async def run() -> None:
            transport = AsyncHttpxTransport(
                transport=_transport_from_handler(lambda request: httpx.Response(404))
            )
            try:
                await transport.fetch(URL)
            finally:
                await transport.aclose()

        with pytest.raises(NotFoundError):
            asyncio.run(run())

    def test_network_error_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def run() -> None:
            transport = AsyncHttpxTransport(transport=_transport_from_handler(handler))
            try:
                await transport.fetch(URL)
            finally:
                await transport.aclose()

        with pytest.raises(TransportError, match="Fetch failed"):
            asyncio.run(run())

    def test_satisfies_protocol(self) -> None:
        async def run() -> bool:
            transport = AsyncHttpxTransport()
            try:
                return isinstance(transport, AsyncTransport)
            finally:
                await transport.aclose()

        assert asyncio.run(run()) is True
