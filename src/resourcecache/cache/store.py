"""In-memory cache store holding one value per resource handle.

The value, its fetch timestamp and the manual-stale flag are guarded by a
single :class:`threading.Lock` and always read or replaced together, so a
reader can never pair the value of one write with the timestamp of
another.  Critical sections only copy references; no I/O or decoding ever
happens while the lock is held.

If anything raises while the lock is held the store is poisoned and every
later operation raises :class:`~resourcecache.exceptions.CacheLockError`.
"""

from __future__ import annotations

import dataclasses
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Generic, Iterator, Optional, TypeVar

from resourcecache.exceptions import CacheLockError
from resourcecache.models import CacheEntry

T = TypeVar("T")


class CacheStore(Generic[T]):
    """Thread-safe holder of the last known good value of a resource.

    Args:
        name: Resource name, used in error messages.

    Example::

        store = CacheStore("settings")
        store.write({"debug": True}, datetime.now(timezone.utc))
        entry = store.read()
        assert entry is not None and not entry.manual_stale
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._poisoned = False
        self._entry: Optional[CacheEntry[T]] = None
        # Kept apart from the entry: mark_stale may run before any write.
        self._manual_stale = False

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            if self._poisoned:
                raise CacheLockError(
                    "Cache store is poisoned by an earlier failure", resource=self._name or None
                )
            try:
                yield
            except BaseException:
                self._poisoned = True
                raise

    def read(self) -> Optional[CacheEntry[T]]:
        """Return a consistent snapshot, or ``None`` if nothing was cached yet."""
        with self._locked():
            if self._entry is None:
                return None
            return dataclasses.replace(self._entry, manual_stale=self._manual_stale)

    def write(self, value: T, fetched_at: datetime) -> None:
        """Replace the cached value and timestamp as one unit.

        Clears the manual-stale flag.
        """
        with self._locked():
            self._entry = CacheEntry(value, fetched_at)
            self._manual_stale = False

    def write_if_empty(self, value: T, fetched_at: datetime) -> bool:
        """Seed the store with a value loaded from a cache file.

        The check and the write happen under one lock acquisition, so a value
        written by a concurrent refresh is never replaced.  The manual-stale
        flag is left untouched.

        Returns:
            True if the store was empty and now holds *value*.
        """
        with self._locked():
            if self._entry is not None:
                return False
            self._entry = CacheEntry(value, fetched_at, seeded=True)
            return True

    def mark_stale(self) -> None:
        """Force the next read to refresh.  Idempotent."""
        with self._locked():
            self._manual_stale = True

    def is_marked_stale(self) -> bool:
        """Whether :meth:`mark_stale` was called since the last write."""
        with self._locked():
            return self._manual_stale

    @property
    def is_poisoned(self) -> bool:
        return self._poisoned
