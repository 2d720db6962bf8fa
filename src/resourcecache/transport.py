"""Network transports used by remote resource handles.

A transport has one job: turn a URL into raw bytes, or raise a
:class:`~resourcecache.exceptions.ResourceError`.  Two protocols are defined
so handles can accept any implementation:

* :class:`Transport` -- blocking ``fetch(url) -> bytes``.
* :class:`AsyncTransport` -- ``await fetch(url) -> bytes``.

The default implementations wrap :class:`httpx.Client` and
:class:`httpx.AsyncClient`.  No retry is performed and, unless
:attr:`~resourcecache.models.RequestConfig.timeout` is set, no timeout is
enforced either.

Status mapping:

* 2xx -- body returned as bytes
* 404 / 410 -- :class:`~resourcecache.exceptions.NotFoundError`
* anything else, and every :class:`httpx.HTTPError` --
  :class:`~resourcecache.exceptions.TransportError`
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import httpx

from resourcecache.exceptions import NotFoundError, TransportError
from resourcecache.models import RequestConfig

_NOT_FOUND_STATUSES = (404, 410)


@runtime_checkable
class Transport(Protocol):
    def fetch(self, url: str) -> bytes:  # pragma: no cover - structural contract
        ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def fetch(self, url: str) -> bytes:  # pragma: no cover - structural contract
        ...


def _client_kwargs(config: RequestConfig) -> dict:
    return {
        "timeout": config.timeout,
        "verify": config.verify_ssl,
        "follow_redirects": config.follow_redirects,
        "headers": config.headers,
    }


def _check_response(response: httpx.Response, url: str) -> bytes:
    """Return the body of a 2xx response or raise a typed error."""
    status = response.status_code
    if 200 <= status < 300:
        return response.content

    reason = response.reason_phrase or ""
    msg = f"HTTP {status} {reason}".strip()
    if status in _NOT_FOUND_STATUSES:
        raise NotFoundError(f"Remote resource not found ({msg})", location=url)
    raise TransportError(f"Unexpected response ({msg})", location=url)


class HttpxTransport:
    """Blocking transport backed by :class:`httpx.Client`.

    Args:
        config: Timeout, SSL and header settings.
        client: An existing client to use.  It is never closed by this
            transport.
        transport: Optional low-level httpx transport, for example
            :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(transport=transport, **_client_kwargs(self._config))

    def fetch(self, url: str) -> bytes:
        """GET *url* and return the response body.

        Raises:
            NotFoundError: On 404 / 410.
            TransportError: On any other non-2xx status or network failure.
        """
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError("Fetch failed", location=url, cause=exc) from exc
        return _check_response(response, url)

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()


class AsyncHttpxTransport:
    """Non-blocking transport backed by :class:`httpx.AsyncClient`.

    Mirrors :class:`HttpxTransport`; see there for the arguments.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport, **_client_kwargs(self._config)
        )

    async def fetch(self, url: str) -> bytes:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError("Fetch failed", location=url, cause=exc) from exc
        return _check_response(response, url)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
