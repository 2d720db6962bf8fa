"""Shared read contract for local and remote resource handles.

Every handle owns one :class:`~resourcecache.cache.CacheStore` and answers
reads the same way; the variants only differ in how raw bytes are obtained
(:meth:`Resource._load_bytes`).

Read entry points:

* :meth:`Resource.get_or_error` -- fresh cached value, else refresh; on
  refresh failure fall back to the cached value tagged ``STALE``, and raise
  only when nothing was ever cached.
* :meth:`Resource.get_or_default` -- as above, but total failure yields the
  type default tagged ``STALE``.
* :meth:`Resource.get_or_none` -- as above, but total failure yields
  ``None``.

:meth:`Resource.mark_as_stale`, :meth:`Resource.is_fresh` and
:meth:`Resource.is_marked_stale` never perform I/O.

Concurrent refreshes on one handle are allowed to run side by side; the
store keeps whichever write completes last.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from resourcecache import codec, staleness
from resourcecache.cache import CacheStore
from resourcecache.exceptions import CacheLockError, ConfigError, ResourceError
from resourcecache.models import (
    FormatTag,
    LocalResourceConfig,
    ReadResult,
    RemoteResourceConfig,
    parse_resource_config,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]
AnyResourceConfig = Union[LocalResourceConfig, RemoteResourceConfig]


class ResourceReader(ABC, Generic[T]):
    """Behavioural contract satisfied by every blocking resource handle."""

    @abstractmethod
    def get_or_error(self, force_refresh: bool = False) -> ReadResult[T]:
        ...

    @abstractmethod
    def get_or_default(self, force_refresh: bool = False) -> ReadResult[T]:
        ...

    @abstractmethod
    def get_or_none(self, force_refresh: bool = False) -> Optional[ReadResult[T]]:
        ...

    @abstractmethod
    def mark_as_stale(self) -> None:
        ...

    @abstractmethod
    def is_fresh(self) -> bool:
        ...

    @abstractmethod
    def is_marked_stale(self) -> bool:
        ...


def _coerce_config(config: Any, expected: type) -> Any:
    if isinstance(config, dict):
        config = parse_resource_config({"kind": expected.model_fields["kind"].default, **config})
    if not isinstance(config, expected):
        raise ConfigError(
            f"Expected {expected.__name__}, got {type(config).__name__}",
            resource=getattr(config, "name", None),
        )
    return config


class ResourceCore(ABC, Generic[T]):
    """State and freshness logic shared by the blocking and async handles.

    Args:
        config: Validated resource configuration (a plain dict is validated
            on the way in).
        model: Optional Pydantic model the decoded document is validated
            into.
        default_factory: Builds the value returned by ``get_or_default``
            when nothing usable exists.  Defaults to ``model()`` when a
            model is given, else ``dict``.
        clock: Returns the current aware UTC time.  Injectable for tests.

    Raises:
        ConfigError: If the configuration is invalid or the default value
            cannot be built.
    """

    _config_type: type = LocalResourceConfig

    def __init__(
        self,
        config: Any,
        *,
        model: Optional[type[BaseModel]] = None,
        default_factory: Optional[Callable[[], T]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = _coerce_config(config, self._config_type)
        self._model = model
        self._clock: Clock = clock or staleness.utcnow
        self._store: CacheStore[T] = CacheStore(self._config.name)
        if default_factory is None:
            default_factory = model if model is not None else dict  # type: ignore[assignment]
        self._default_factory = default_factory
        try:
            self._default_factory()
        except Exception as exc:
            raise ConfigError(
                "Cannot build the default value; pass default_factory",
                resource=self._config.name,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> AnyResourceConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def format(self) -> FormatTag:
        return self._config.format

    @property
    @abstractmethod
    def location(self) -> str:
        """The path or URL this handle reads from."""

    @property
    def last_fetched_at(self) -> Optional[datetime]:
        """When the cached value was retrieved, or ``None``.  No I/O."""
        entry = self._store.read()
        return entry.fetched_at if entry is not None else None

    # ------------------------------------------------------------------ #
    # State projections (no I/O)
    # ------------------------------------------------------------------ #

    def mark_as_stale(self) -> None:
        """Force the next read to refresh, whatever the ttl.  Performs no I/O."""
        self._store.mark_stale()
        logger.debug("Resource '%s' marked stale", self.name)

    def is_fresh(self) -> bool:
        """Current freshness verdict of the cached value.  Performs no I/O."""
        entry = self._store.read()
        if entry is None:
            return False
        return staleness.is_fresh(
            True, entry.must_refresh, entry.fetched_at, self._config.ttl, self._clock()
        )

    def is_marked_stale(self) -> bool:
        """Whether :meth:`mark_as_stale` was called since the last refresh."""
        return self._store.is_marked_stale()

    def stats(self) -> dict[str, Any]:
        """Return a snapshot of the handle's state.

        Returns:
            A ``dict`` with ``name``, ``kind``, ``format``, ``location``,
            ``ttl_seconds``, ``cached`` (bool), ``fetched_at`` (ISO string
            or ``None``), ``marked_stale``, ``seeded`` and ``fresh``.
        """
        entry = self._store.read()
        fresh = False
        if entry is not None:
            fresh = staleness.is_fresh(
                True, entry.must_refresh, entry.fetched_at, self._config.ttl, self._clock()
            )
        return {
            "name": self.name,
            "kind": self._config.kind,
            "format": self.format.value,
            "location": self.location,
            "ttl_seconds": self._config.ttl_seconds,
            "cached": entry is not None,
            "fetched_at": entry.fetched_at.isoformat() if entry is not None else None,
            "marked_stale": self._store.is_marked_stale(),
            "seeded": entry.seeded if entry is not None else False,
            "fresh": fresh,
        }

    # ------------------------------------------------------------------ #
    # Shared refresh helpers
    # ------------------------------------------------------------------ #

    def _cached_if_fresh(self, force_refresh: bool) -> Optional[ReadResult[T]]:
        """Return the cached value when it can be served without a refresh."""
        if force_refresh:
            return None
        entry = self._store.read()
        if entry is None:
            return None
        if staleness.is_fresh(
            True, entry.must_refresh, entry.fetched_at, self._config.ttl, self._clock()
        ):
            logger.debug("Cache hit for resource '%s'", self.name)
            return ReadResult.fresh(entry.value)
        return None

    def _decode(self, data: bytes) -> T:
        try:
            return codec.decode(data, self.format, self._model)
        except ResourceError as exc:
            exc.location = exc.location or self.location
            raise exc.with_resource(self.name)

    def _store_value(self, value: T) -> ReadResult[T]:
        self._store.write(value, self._clock())
        logger.debug("Refreshed resource '%s' from %s", self.name, self.location)
        return ReadResult.fresh(value)

    def _fallback(self, exc: ResourceError) -> ReadResult[T]:
        """Serve the cached value after a failed refresh, or re-raise *exc*."""
        if isinstance(exc, CacheLockError):
            raise exc
        exc.with_resource(self.name)
        entry = self._store.read()
        if entry is None:
            raise exc
        logger.warning("Refresh of resource '%s' failed, serving stale value: %s", self.name, exc)
        return ReadResult.stale(entry.value)

    def _default_result(self, exc: ResourceError) -> ReadResult[T]:
        if isinstance(exc, CacheLockError):
            raise exc
        logger.warning("No value available for resource '%s', using default: %s", self.name, exc)
        return ReadResult.stale(self._default_factory())

    def _none_result(self, exc: ResourceError) -> None:
        if isinstance(exc, CacheLockError):
            raise exc
        logger.warning("No value available for resource '%s': %s", self.name, exc)
        return None

    def _prepare(self) -> None:
        """Hook run before every read; remote handles seed from disk here."""


class Resource(ResourceCore[T], ResourceReader[T]):
    """Blocking resource handle.  Subclasses provide :meth:`_load_bytes`."""

    @abstractmethod
    def _load_bytes(self) -> bytes:
        """Obtain the raw bytes of the resource, raising a ResourceError on failure."""

    def _refresh(self) -> ReadResult[T]:
        return self._store_value(self._decode(self._load_bytes()))

    def get_or_error(self, force_refresh: bool = False) -> ReadResult[T]:
        """Return the cached value if fresh, otherwise refresh it.

        Args:
            force_refresh: Refresh even when the cached value is fresh.

        Returns:
            ``FRESH`` with the cached or newly loaded value, or ``STALE``
            with the previously cached value when the refresh failed.

        Raises:
            ResourceError: If the refresh failed and nothing was cached.
        """
        self._prepare()
        cached = self._cached_if_fresh(force_refresh)
        if cached is not None:
            return cached
        try:
            return self._refresh()
        except ResourceError as exc:
            return self._fallback(exc)

    def get_or_default(self, force_refresh: bool = False) -> ReadResult[T]:
        """Like :meth:`get_or_error`, but total failure yields the default tagged ``STALE``."""
        try:
            return self.get_or_error(force_refresh)
        except ResourceError as exc:
            return self._default_result(exc)

    def get_or_none(self, force_refresh: bool = False) -> Optional[ReadResult[T]]:
        """Like :meth:`get_or_error`, but total failure yields ``None``."""
        try:
            return self.get_or_error(force_refresh)
        except ResourceError as exc:
            return self._none_result(exc)


class AsyncResource(ResourceCore[T]):
    """Async resource handle.  Subclasses provide :meth:`_load_bytes` as a coroutine.

    Mirrors :class:`Resource`; only the byte loading suspends.
    """

    @abstractmethod
    async def _load_bytes(self) -> bytes:
        """Obtain the raw bytes of the resource, raising a ResourceError on failure."""

    async def _aprepare(self) -> None:
        self._prepare()

    async def _refresh(self) -> ReadResult[T]:
        data = await self._load_bytes()
        return self._store_value(self._decode(data))

    async def get_or_error(self, force_refresh: bool = False) -> ReadResult[T]:
        """See :meth:`Resource.get_or_error`."""
        await self._aprepare()
        cached = self._cached_if_fresh(force_refresh)
        if cached is not None:
            return cached
        try:
            return await self._refresh()
        except ResourceError as exc:
            return self._fallback(exc)

    async def get_or_default(self, force_refresh: bool = False) -> ReadResult[T]:
        """See :meth:`Resource.get_or_default`."""
        try:
            return await self.get_or_error(force_refresh)
        except ResourceError as exc:
            return self._default_result(exc)

    async def get_or_none(self, force_refresh: bool = False) -> Optional[ReadResult[T]]:
        """See :meth:`Resource.get_or_none`."""
        try:
            return await self.get_or_error(force_refresh)
        except ResourceError as exc:
            return self._none_result(exc)
