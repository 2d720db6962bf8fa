"""Exception hierarchy for resourcecache.

All exceptions inherit from :class:`ResourceError`, which carries a
class-level ``kind`` drawn from :class:`ErrorKind` plus the context needed to
diagnose a failure without inspecting internals: the resource name, the path
or URL that was attempted, and the underlying cause.

Whether an error ever reaches the caller depends on the read entry point
used (see :class:`~resourcecache.resource.base.Resource`): refresh failures
are swallowed whenever a previously cached value can be served instead.

Subclass hierarchy::

    ResourceError
    +-- NotFoundError           (not_found)
    +-- TransportError          (transport)
    +-- ResourceIOError         (io)
    +-- ParseError              (parse)
    +-- UnsupportedFormatError  (unsupported_format)
    +-- CacheLockError          (cache_lock)
    +-- ConfigError             (config)
"""

from __future__ import annotations

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Semantic category of a :class:`ResourceError`."""

    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    IO = "io"
    PARSE = "parse"
    UNSUPPORTED_FORMAT = "unsupported_format"
    CACHE_LOCK = "cache_lock"
    CONFIG = "config"


class ResourceError(Exception):
    """Base exception for all resourcecache errors.

    Args:
        message: Human-readable error description.
        resource: Name of the resource handle involved, if any.
        location: Path or URL that was being read, fetched or written.
        cause: The lower-level exception that triggered this one.
    """

    kind: ErrorKind = ErrorKind.IO

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        location: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.location = location
        self.cause = cause

    def __str__(self) -> str:
        parts = []
        if self.resource:
            parts.append(f"[{self.resource}]")
        parts.append(self.message)
        if self.location:
            parts.append(f"(at {self.location})")
        if self.cause is not None:
            parts.append(f": {self.cause}")
        return " ".join(parts)

    def with_resource(self, resource: str) -> ResourceError:
        """Attach the resource name if the raiser did not know it."""
        if self.resource is None:
            self.resource = resource
        return self


class NotFoundError(ResourceError):
    """Raised when a local path is missing or the remote resource is absent (HTTP 404/410)."""

    kind = ErrorKind.NOT_FOUND


class TransportError(ResourceError):
    """Raised on network-level failures or non-success HTTP responses."""

    kind = ErrorKind.TRANSPORT


class ResourceIOError(ResourceError):
    """Raised when local bytes cannot be read or written.

    Named with a prefix to avoid shadowing the built-in ``IOError``.
    """

    kind = ErrorKind.IO


class ParseError(ResourceError):
    """Raised when bytes do not conform to the declared format or model."""

    kind = ErrorKind.PARSE


class UnsupportedFormatError(ResourceError):
    """Raised for format tags that are reserved but not implemented."""

    kind = ErrorKind.UNSUPPORTED_FORMAT


class CacheLockError(ResourceError):
    """Raised when a cache store's lock was poisoned by an earlier failure.

    This is fatal for the handle that owns the store.
    """

    kind = ErrorKind.CACHE_LOCK


class ConfigError(ResourceError):
    """Raised for invalid handle configuration."""

    kind = ErrorKind.CONFIG
