"""Resource handle backed by a local file.

The file is re-read on every refresh.  Without a ttl, a value once loaded
stays fresh until :meth:`~resourcecache.resource.base.ResourceCore.mark_as_stale`
is called; a ttl only bounds how often the file is re-read and re-parsed.
"""

from __future__ import annotations

from typing import TypeVar

from resourcecache import storage
from resourcecache.models import LocalResourceConfig
from resourcecache.resource.base import Resource

T = TypeVar("T")


class LocalResource(Resource[T]):
    """Read a JSON or YAML document from disk with cached, tagged results.

    Args:
        config: A :class:`~resourcecache.models.LocalResourceConfig` or an
            equivalent dict.
        **kwargs: ``model``, ``default_factory`` and ``clock``, see
            :class:`~resourcecache.resource.base.ResourceCore`.

    Example::

        settings = LocalResource(
            LocalResourceConfig(name="settings", format="json", path="settings.json")
        )
        result = settings.get_or_error()
        if result.is_stale:
            ...
    """

    _config_type = LocalResourceConfig

    @property
    def path(self):
        return self._config.path

    @property
    def location(self) -> str:
        return str(self._config.path)

    def _load_bytes(self) -> bytes:
        return storage.read_bytes(self._config.path)
