"""In-memory caching for resourcecache.

This package provides :class:`CacheStore`, the per-handle holder of the last
successfully parsed value, its fetch timestamp and the manual-stale flag.

The store is owned by a :class:`~resourcecache.resource.base.Resource` and
consulted together with :func:`~resourcecache.staleness.is_fresh` on every
read.
"""

from resourcecache.cache.store import CacheStore

__all__ = ["CacheStore"]
