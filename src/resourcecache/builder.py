"""Construction helpers for resource handles.

:func:`build_resource` turns a validated configuration (or a plain dict with
a ``kind`` key) into the matching handle.  :class:`ResourceBuilder` offers a
fluent alternative; nothing is validated until one of its ``build_*``
methods is called, and a failed build never yields a handle.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ValidationError

from resourcecache.exceptions import ConfigError
from resourcecache.models import (
    FormatTag,
    LocalResourceConfig,
    RemoteResourceConfig,
    RequestConfig,
    parse_resource_config,
)
from resourcecache.resource import AsyncRemoteResource, LocalResource, RemoteResource
from resourcecache.resource.base import Clock


def build_resource(
    config: Union[LocalResourceConfig, RemoteResourceConfig, dict[str, Any]],
    **kwargs: Any,
) -> Union[LocalResource, RemoteResource]:
    """Build a blocking handle for *config*.

    Args:
        config: A resource config model, or a dict whose ``kind`` selects
            the variant.
        **kwargs: Forwarded to the handle (``model``, ``default_factory``,
            ``clock``, and ``transport`` for remote handles).

    Raises:
        ConfigError: If the configuration is invalid.
    """
    if isinstance(config, dict):
        config = parse_resource_config(config)
    if isinstance(config, LocalResourceConfig):
        return LocalResource(config, **kwargs)
    if isinstance(config, RemoteResourceConfig):
        return RemoteResource(config, **kwargs)
    raise ConfigError(f"Unknown resource configuration type: {type(config).__name__}")


class ResourceBuilder:
    """Fluent builder for resource handles.

    Example::

        settings = (
            ResourceBuilder("settings")
            .format("yaml")
            .path("settings.yaml")
            .ttl(30)
            .build_local()
        )
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self._fields: dict[str, Any] = {}
        self._request: dict[str, Any] = {}
        self._handle_kwargs: dict[str, Any] = {}
        if name is not None:
            self._fields["name"] = name

    def name(self, name: str) -> ResourceBuilder:
        self._fields["name"] = name
        return self

    def format(self, format_tag: Union[FormatTag, str]) -> ResourceBuilder:
        self._fields["format"] = format_tag
        return self

    def path(self, path: Union[str, Path]) -> ResourceBuilder:
        """Source file of a local resource."""
        self._fields["path"] = path
        return self

    def url(self, url: str) -> ResourceBuilder:
        self._fields["url"] = url
        return self

    def cache_path(self, path: Union[str, Path]) -> ResourceBuilder:
        """Cache file of a remote resource."""
        self._fields["cache_path"] = path
        return self

    def ttl(self, ttl: Union[float, timedelta, None]) -> ResourceBuilder:
        """Maximum age of a cached value, in seconds or as a timedelta."""
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()
        self._fields["ttl_seconds"] = ttl
        return self

    def seed_from_disk(self, enabled: bool = True) -> ResourceBuilder:
        self._fields["seed_from_disk"] = enabled
        return self

    def timeout(self, seconds: Optional[float]) -> ResourceBuilder:
        """Fetch timeout for the default remote transport."""
        self._request["timeout"] = seconds
        return self

    def headers(self, headers: dict[str, str]) -> ResourceBuilder:
        self._request.setdefault("headers", {}).update(headers)
        return self

    def model(self, model: type[BaseModel]) -> ResourceBuilder:
        self._handle_kwargs["model"] = model
        return self

    def default_factory(self, factory: Callable[[], Any]) -> ResourceBuilder:
        self._handle_kwargs["default_factory"] = factory
        return self

    def transport(self, transport: Any) -> ResourceBuilder:
        self._handle_kwargs["transport"] = transport
        return self

    def clock(self, clock: Clock) -> ResourceBuilder:
        self._handle_kwargs["clock"] = clock
        return self

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #

    def local_config(self) -> LocalResourceConfig:
        if self._request or "url" in self._fields:
            raise ConfigError(
                "URL and request settings only apply to remote resources",
                resource=self._fields.get("name"),
            )
        return self._validate(LocalResourceConfig, self._fields)

    def remote_config(self) -> RemoteResourceConfig:
        fields = dict(self._fields)
        if self._request:
            fields["request"] = self._validate(RequestConfig, self._request)
        return self._validate(RemoteResourceConfig, fields)

    def build_local(self) -> LocalResource:
        """Validate the collected settings and build a :class:`LocalResource`.

        Raises:
            ConfigError: If a required setting is missing or invalid.
        """
        kwargs = dict(self._handle_kwargs)
        if kwargs.pop("transport", None) is not None:
            raise ConfigError(
                "A transport only applies to remote resources", resource=self._fields.get("name")
            )
        return LocalResource(self.local_config(), **kwargs)

    def build_remote(self) -> RemoteResource:
        """Validate the collected settings and build a :class:`RemoteResource`."""
        return RemoteResource(self.remote_config(), **self._handle_kwargs)

    def build_async_remote(self) -> AsyncRemoteResource:
        """Validate the collected settings and build an :class:`AsyncRemoteResource`."""
        return AsyncRemoteResource(self.remote_config(), **self._handle_kwargs)

    def _validate(self, model: type[BaseModel], data: dict[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid {model.__name__}", resource=self._fields.get("name"), cause=exc
            ) from exc
