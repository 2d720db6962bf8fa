"""Canonical models shared across all resourcecache modules.

The models fall into two groups:

**Configuration models** -- validated with Pydantic v2 when a handle is
built, so that no partially-initialised handle is ever exposed:
    :class:`RequestConfig`, :class:`LocalResourceConfig`,
    :class:`RemoteResourceConfig` and the :data:`ResourceConfig` union.

**Value models** -- produced at read time:
    :class:`FormatTag`, :class:`Freshness`, :class:`ReadResult` and
    :class:`CacheEntry`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from resourcecache.exceptions import ConfigError

T = TypeVar("T")


# --- Value models ---


class FormatTag(str, enum.Enum):
    """Declared serialisation format of a resource.

    ``TOML`` and ``TEXT`` are reserved: they are accepted in configuration
    but every codec operation on them raises
    :class:`~resourcecache.exceptions.UnsupportedFormatError`.
    """

    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    TEXT = "text"

    @property
    def extension(self) -> str:
        """File extension used for default cache file names."""
        return {"json": ".json", "yaml": ".yaml", "toml": ".toml", "text": ".txt"}[self.value]


class Freshness(str, enum.Enum):
    """Freshness verdict attached to every :class:`ReadResult`."""

    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """A resource payload tagged with the freshness of that payload.

    The tag describes the value being returned, not whether a refresh was
    just attempted: a failed refresh that falls back to a cached value yields
    ``STALE``.
    """

    value: T
    freshness: Freshness

    @classmethod
    def fresh(cls, value: T) -> ReadResult[T]:
        return cls(value, Freshness.FRESH)

    @classmethod
    def stale(cls, value: T) -> ReadResult[T]:
        return cls(value, Freshness.STALE)

    @property
    def is_fresh(self) -> bool:
        return self.freshness is Freshness.FRESH

    @property
    def is_stale(self) -> bool:
        return self.freshness is Freshness.STALE


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Consistent snapshot of a cache store.

    Attributes:
        value: The last successfully parsed payload.
        fetched_at: UTC time at which ``value`` was retrieved.
        manual_stale: Whether :meth:`~resourcecache.cache.CacheStore.mark_stale`
            was called since ``value`` was written.
        seeded: Whether ``value`` was loaded from a cache file rather than
            from the source itself.  A seeded value is never fresh.
    """

    value: T
    fetched_at: datetime
    manual_stale: bool = False
    seeded: bool = False

    @property
    def must_refresh(self) -> bool:
        """True when the value may not be served as fresh, whatever its age."""
        return self.manual_stale or self.seeded


# --- Configuration models ---


class RequestConfig(BaseModel):
    """HTTP settings for the default remote transport."""

    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Fetch timeout in seconds; None waits indefinitely",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every fetch"
    )


class _BaseResourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Resource identifier used in logs and errors")
    format: FormatTag = Field(default=FormatTag.JSON, description="Declared serialisation format")
    ttl_seconds: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Maximum age of a cached value; None never expires by age",
    )

    @field_validator("ttl_seconds")
    @classmethod
    def _check_ttl_range(cls, value: Optional[float]) -> Optional[float]:
        if value is not None:
            try:
                timedelta(seconds=value)
            except OverflowError:
                raise ValueError(f"ttl_seconds is too large (got {value!r})") from None
        return value

    @property
    def ttl(self) -> Optional[timedelta]:
        """The ttl as a :class:`~datetime.timedelta`, or ``None``."""
        if self.ttl_seconds is None:
            return None
        return timedelta(seconds=self.ttl_seconds)


class LocalResourceConfig(_BaseResourceConfig):
    """Configuration for a resource read from a local file.

    Example::

        LocalResourceConfig(name="settings", format="json", path="settings.json")
    """

    kind: Literal["local"] = "local"
    path: Path = Field(description="File read on every refresh")


class RemoteResourceConfig(_BaseResourceConfig):
    """Configuration for a resource fetched over HTTP(S).

    ``cache_path`` defaults to ``<cache dir>/<name><ext>`` (see
    :func:`~resourcecache.config.default_cache_path`) when the handle is
    built.
    """

    kind: Literal["remote"] = "remote"
    url: str = Field(description="Absolute http:// or https:// URL")
    cache_path: Optional[Path] = Field(
        default=None, description="File holding the raw bytes of the last fetch"
    )
    seed_from_disk: bool = Field(
        default=True,
        description="Seed an empty in-memory cache from cache_path on first read",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)

    @field_validator("url")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https:// (got {value!r})")
        return value


ResourceConfig = Annotated[
    Union[LocalResourceConfig, RemoteResourceConfig],
    Field(discriminator="kind"),
]

_resource_config_adapter: TypeAdapter[Any] = TypeAdapter(ResourceConfig)


def parse_resource_config(data: dict[str, Any]) -> Union[LocalResourceConfig, RemoteResourceConfig]:
    """Validate a plain mapping into the matching resource config.

    The ``kind`` key (``"local"`` or ``"remote"``) selects the variant.

    Raises:
        ConfigError: If the mapping does not describe a valid resource.
    """
    try:
        return _resource_config_adapter.validate_python(data)
    except ValidationError as exc:
        name = data.get("name") if isinstance(data, dict) else None
        raise ConfigError("Invalid resource configuration", resource=name, cause=exc) from exc
