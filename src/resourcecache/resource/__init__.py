"""Resource handles: one cached value per local file or remote endpoint.

* :class:`LocalResource` -- re-reads a file on refresh.
* :class:`RemoteResource` -- fetches over HTTP(S) and keeps a cache file.
* :class:`AsyncRemoteResource` -- the non-blocking remote handle.

All of them share the read contract defined in
:mod:`resourcecache.resource.base`.
"""

from resourcecache.resource.async_remote import AsyncRemoteResource
from resourcecache.resource.base import AsyncResource, Resource, ResourceReader
from resourcecache.resource.local import LocalResource
from resourcecache.resource.remote import RemoteResource

__all__ = [
    "AsyncRemoteResource",
    "AsyncResource",
    "LocalResource",
    "RemoteResource",
    "Resource",
    "ResourceReader",
]
