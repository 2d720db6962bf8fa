"""Resource handle backed by an HTTP(S) endpoint.

Every successful fetch writes the raw response bytes to the handle's cache
file (atomically, see :func:`~resourcecache.storage.write_bytes_atomic`)
before they are parsed.  While the process lives, the in-memory cache store
is the fallback used when a fetch fails; the cache file only matters after
a restart, when it seeds the empty store on the first read.  A seeded value
is reported ``STALE`` until a live fetch succeeds.

See Also:
    :class:`~resourcecache.resource.async_remote.AsyncRemoteResource` for
    the non-blocking equivalent.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Optional, TypeVar

from resourcecache import storage
from resourcecache.config import default_cache_path
from resourcecache.exceptions import ResourceError
from resourcecache.models import RemoteResourceConfig
from resourcecache.resource.base import Resource, ResourceCore
from resourcecache.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteCacheFile(ResourceCore[T]):
    """Cache-file handling shared by the blocking and async remote handles."""

    _config_type = RemoteResourceConfig

    def _init_cache_file(self) -> None:
        self._cache_path: Path = self._config.cache_path or default_cache_path(
            self._config.name, self._config.format
        )
        self._seed_lock = threading.Lock()
        self._seeded = not self._config.seed_from_disk

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    @property
    def location(self) -> str:
        return self._config.url

    def _prepare(self) -> None:
        if self._seeded:
            return
        with self._seed_lock:
            if self._seeded:
                return
            try:
                self._seed_from_disk()
            finally:
                self._seeded = True

    def _seed_from_disk(self) -> None:
        """Load the cache file into an empty store as a value that is never fresh."""
        if self._store.read() is not None or not storage.exists(self._cache_path):
            return
        try:
            data = storage.read_bytes(self._cache_path)
            fetched_at = storage.modified_at(self._cache_path)
            value = self._decode(data)
        except ResourceError as exc:
            logger.warning(
                "Ignoring unreadable cache file %s for resource '%s': %s",
                self._cache_path, self.name, exc,
            )
            return
        if self._store.write_if_empty(value, fetched_at):
            logger.debug("Seeded resource '%s' from %s", self.name, self._cache_path)

    def _persist(self, data: bytes) -> None:
        try:
            storage.write_bytes_atomic(self._cache_path, data)
        except ResourceError as exc:
            logger.warning(
                "Could not persist resource '%s' to %s: %s", self.name, self._cache_path, exc
            )
            return
        logger.debug("Persisted resource '%s' to %s", self.name, self._cache_path)

    def stats(self) -> dict[str, Any]:
        info = super().stats()
        info["cache_path"] = str(self._cache_path)
        return info


class RemoteResource(RemoteCacheFile[T], Resource[T]):
    """Fetch a JSON or YAML document over HTTP(S) with cached, tagged results.

    Args:
        config: A :class:`~resourcecache.models.RemoteResourceConfig` or an
            equivalent dict.
        transport: Anything with ``fetch(url) -> bytes``.  Defaults to an
            :class:`~resourcecache.transport.HttpxTransport` built from
            ``config.request``, which :meth:`close` releases.
        **kwargs: ``model``, ``default_factory`` and ``clock``, see
            :class:`~resourcecache.resource.base.ResourceCore`.

    Example::

        with RemoteResource(
            RemoteResourceConfig(name="flags", url="https://cfg.example.com/flags.json",
                                 ttl_seconds=60)
        ) as flags:
            result = flags.get_or_default()
    """

    def __init__(self, config: Any, *, transport: Optional[Transport] = None, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._init_cache_file()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(self._config.request)

    def __enter__(self) -> RemoteResource[T]:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the default transport.  Injected transports are left open."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    def _load_bytes(self) -> bytes:
        data = self._transport.fetch(self._config.url)
        self._persist(data)
        return data
