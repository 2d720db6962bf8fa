"""Asynchronous remote resource -- mirrors :class:`~resourcecache.resource.remote.RemoteResource`.

The network fetch is awaited on the event loop; seeding from the cache file
and persisting fetched bytes (both fsync'd disk I/O) run in a worker thread
via :func:`asyncio.to_thread`.  Cache store access and freshness checks stay
on the loop: they only copy references under the store lock.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, TypeVar

from resourcecache.resource.base import AsyncResource
from resourcecache.resource.remote import RemoteCacheFile
from resourcecache.transport import AsyncHttpxTransport, AsyncTransport

T = TypeVar("T")


class AsyncRemoteResource(RemoteCacheFile[T], AsyncResource[T]):
    """Non-blocking remote resource handle.

    Must be closed with :meth:`aclose` (or used as an async context
    manager) when it created its own transport.

    Example::

        async with AsyncRemoteResource(config) as flags:
            result = await flags.get_or_error()
    """

    def __init__(
        self, config: Any, *, transport: Optional[AsyncTransport] = None, **kwargs: Any
    ) -> None:
        super().__init__(config, **kwargs)
        self._init_cache_file()
        self._owns_transport = transport is None
        self._transport: AsyncTransport = transport or AsyncHttpxTransport(self._config.request)

    async def __aenter__(self) -> AsyncRemoteResource[T]:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self._transport, AsyncHttpxTransport):
            await self._transport.aclose()

    async def _aprepare(self) -> None:
        if not self._seeded:
            await asyncio.to_thread(self._prepare)

    async def _load_bytes(self) -> bytes:
        data = await self._transport.fetch(self._config.url)
        await asyncio.to_thread(self._persist, data)
        return data
