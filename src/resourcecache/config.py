"""Cache directory resolution for remote resources.

Remote handles persist the raw bytes of their last fetch so that a restarted
process can fall back to them.  Unless a handle configures an explicit
``cache_path``, the file lives in the resourcecache cache directory:

* ``$RESOURCECACHE_CACHE_DIR`` when set,
* ``$XDG_CACHE_HOME/resourcecache/`` (default ``~/.cache/resourcecache/``) on
  Linux/BSD,
* ``~/.resourcecache/cache/`` on macOS and Windows.

Cached data can be safely deleted at any time.
"""

from __future__ import annotations

import os
import platform
import re
from pathlib import Path

from resourcecache.models import FormatTag

_APP_NAME = "resourcecache"
_CACHE_DIR_ENV = "RESOURCECACHE_CACHE_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    override = os.environ.get(_CACHE_DIR_ENV, "")
    if override:
        path = Path(override).expanduser()
    elif _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_file_stem(name: str) -> str:
    """Turn a resource name into something usable as a file name."""
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return stem or "resource"


def default_cache_path(name: str, format_tag: FormatTag) -> Path:
    """Return ``<cache dir>/<name><ext>`` for a remote resource."""
    return get_cache_dir() / f"{_safe_file_stem(name)}{FormatTag(format_tag).extension}"
