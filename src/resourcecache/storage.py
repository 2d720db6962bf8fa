"""Filesystem access for resource handles.

Local handles read their source file through :func:`read_bytes`; remote
handles persist fetched bytes through :func:`write_bytes_atomic`, which uses
a temp-file-then-rename strategy so that a concurrent reader or a crashed
process never observes a partially written cache file.

``FileNotFoundError`` is reported as
:class:`~resourcecache.exceptions.NotFoundError`; every other ``OSError``
becomes :class:`~resourcecache.exceptions.ResourceIOError`.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from resourcecache.exceptions import NotFoundError, ResourceIOError

PathLike = Union[str, Path]


def exists(path: PathLike) -> bool:
    """Return True if *path* is an existing regular file."""
    return Path(path).is_file()


def read_bytes(path: PathLike) -> bytes:
    """Read the whole file at *path*.

    Raises:
        NotFoundError: If the file does not exist.
        ResourceIOError: If the path is a directory or cannot be read.
    """
    file_path = Path(path)
    try:
        return file_path.read_bytes()
    except FileNotFoundError as exc:
        raise NotFoundError("File not found", location=str(file_path), cause=exc) from exc
    except OSError as exc:
        raise ResourceIOError("Failed to read file", location=str(file_path), cause=exc) from exc


def modified_at(path: PathLike) -> datetime:
    """Return the modification time of *path* as an aware UTC datetime.

    Raises:
        NotFoundError: If the file does not exist.
        ResourceIOError: If the file cannot be stat'ed.
    """
    file_path = Path(path)
    try:
        mtime = file_path.stat().st_mtime
    except FileNotFoundError as exc:
        raise NotFoundError("File not found", location=str(file_path), cause=exc) from exc
    except OSError as exc:
        raise ResourceIOError("Failed to stat file", location=str(file_path), cause=exc) from exc
    return datetime.fromtimestamp(mtime, tz=timezone.utc)


def write_bytes_atomic(path: PathLike, data: bytes) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.

    Raises:
        ResourceIOError: If the directory cannot be created or the file
            cannot be written or renamed.
    """
    file_path = Path(path)
    fd = None
    tmp_path: Optional[str] = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=file_path.parent,
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, file_path)
    except BaseException as exc:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        if isinstance(exc, OSError):
            raise ResourceIOError(
                "Failed to write file", location=str(file_path), cause=exc
            ) from exc
        raise
