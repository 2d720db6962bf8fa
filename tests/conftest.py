"""Shared test fixtures for resourcecache.

Provides a controllable clock, recording fake transports, isolated cache
directories and small document fixtures.  These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pytest

from resourcecache.exceptions import ResourceError, TransportError


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced UTC clock, injectable as a handle's ``clock``."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2030, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


Reply = Union[bytes, ResourceError, Callable[[str], bytes]]


class FakeTransport:
    """Transport returning scripted replies and recording every fetched URL.

    A reply is either bytes, an exception to raise, or a callable taking the
    URL.  The last reply repeats once the script is exhausted.
    """

    def __init__(self, *replies: Reply) -> None:
        self.replies: list[Reply] = list(replies)
        self.calls: list[str] = []

    def _next(self, url: str) -> bytes:
        self.calls.append(url)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(url)
        return reply

    def fetch(self, url: str) -> bytes:
        return self._next(url)


class FakeAsyncTransport(FakeTransport):
    async def fetch(self, url: str) -> bytes:  # type: ignore[override]
        return self._next(url)


def transport_failure(url: str = "https://cfg.example.com/data.json") -> TransportError:
    return TransportError("Fetch failed", location=url, cause=ConnectionRefusedError("refused"))


@pytest.fixture
def fake_transport_factory() -> Callable[..., FakeTransport]:
    return FakeTransport


# ---------------------------------------------------------------------------
# Files and directories
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default cache directory at a temporary location."""
    path = tmp_path / "cache"
    monkeypatch.setenv("RESOURCECACHE_CACHE_DIR", str(path))
    return path


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """A JSON document matching the settings scenario."""
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"api_key": "x", "timeout": 5}), encoding="utf-8")
    return path


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
