"""resourcecache -- cached, staleness-aware access to local and remote documents.

A *resource handle* represents one JSON or YAML document, read from a local
file or fetched over HTTP(S).  The handle keeps the last successfully parsed
value in memory and tags every read as fresh or stale::

    from resourcecache import LocalResource, LocalResourceConfig

    settings = LocalResource(
        LocalResourceConfig(name="settings", format="json", path="settings.json")
    )
    result = settings.get_or_error()
    print(result.value, result.freshness)

When a refresh fails, a previously cached value is served tagged stale
instead of raising.

Modules:
    models: Pydantic configuration models and read-time value types.
    codec: JSON/YAML decoding and encoding.
    staleness: Pure freshness computation.
    cache: Thread-safe in-memory cache store.
    resource: Local, remote and async remote handles.
    builder: Construction helpers.
    exceptions: Error hierarchy.
"""

from resourcecache.builder import ResourceBuilder, build_resource
from resourcecache.cache import CacheStore
from resourcecache.exceptions import (
    CacheLockError,
    ConfigError,
    ErrorKind,
    NotFoundError,
    ParseError,
    ResourceError,
    ResourceIOError,
    TransportError,
    UnsupportedFormatError,
)
from resourcecache.models import (
    CacheEntry,
    FormatTag,
    Freshness,
    LocalResourceConfig,
    ReadResult,
    RemoteResourceConfig,
    RequestConfig,
    parse_resource_config,
)
from resourcecache.resource import (
    AsyncRemoteResource,
    LocalResource,
    RemoteResource,
    ResourceReader,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncRemoteResource",
    "CacheEntry",
    "CacheLockError",
    "CacheStore",
    "ConfigError",
    "ErrorKind",
    "FormatTag",
    "Freshness",
    "LocalResource",
    "LocalResourceConfig",
    "NotFoundError",
    "ParseError",
    "ReadResult",
    "RemoteResource",
    "RemoteResourceConfig",
    "RequestConfig",
    "ResourceBuilder",
    "ResourceError",
    "ResourceIOError",
    "ResourceReader",
    "TransportError",
    "UnsupportedFormatError",
    "build_resource",
    "parse_resource_config",
]
