"""Tests for the in-memory CacheStore."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from resourcecache.cache import CacheStore
from resourcecache.exceptions import CacheLockError

T0 = datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.fixture()
def store() -> CacheStore:
    return CacheStore("settings")


# ------------------------------------------------------------------ #
# Read / write
# ------------------------------------------------------------------ #


class TestReadWrite:
    def test_empty_store_reads_none(self, store: CacheStore) -> None:
        assert store.read() is None

    def test_write_then_read(self, store: CacheStore) -> None:
        store.write({"n": 1}, T0)
        entry = store.read()
        assert entry is not None
        assert entry.value == {"n": 1}
        assert entry.fetched_at == T0
        assert entry.manual_stale is False

    def test_none_value_is_still_a_value(self, store: CacheStore) -> None:
        store.write(None, T0)
        entry = store.read()
        assert entry is not None
        assert entry.value is None

    def test_write_replaces_pair(self, store: CacheStore) -> None:
        store.write("old", T0)
        store.write("new", T0 + timedelta(seconds=1))
        entry = store.read()
        assert entry is not None
        assert (entry.value, entry.fetched_at) == ("new", T0 + timedelta(seconds=1))

    def test_write_clears_seeded_marker(self, store: CacheStore) -> None:
        store.write_if_empty("seed", T0)
        store.write("live", T0)
        entry = store.read()
        assert entry is not None
        assert entry.seeded is False
        assert entry.must_refresh is False


# ------------------------------------------------------------------ #
# Seeding
# ------------------------------------------------------------------ #


class TestWriteIfEmpty:
    def test_seeds_empty_store(self, store: CacheStore) -> None:
        assert store.write_if_empty("seed", T0) is True
        entry = store.read()
        assert entry is not None
        assert (entry.value, entry.fetched_at, entry.seeded) == ("seed", T0, True)
        assert entry.must_refresh is True

    def test_does_not_replace_existing_value(self, store: CacheStore) -> None:
        store.write("live", T0 + timedelta(seconds=5))
        assert store.write_if_empty("seed", T0) is False
        entry = store.read()
        assert entry is not None
        assert (entry.value, entry.seeded) == ("live", False)

    def test_seeding_does_not_set_manual_flag(self, store: CacheStore) -> None:
        store.write_if_empty("seed", T0)
        assert store.is_marked_stale() is False

    def test_seeding_keeps_earlier_manual_flag(self, store: CacheStore) -> None:
        store.mark_stale()
        store.write_if_empty("seed", T0)
        entry = store.read()
        assert entry is not None and entry.manual_stale is True


# ------------------------------------------------------------------ #
# Manual-stale flag
# ------------------------------------------------------------------ #


class TestMarkStale:
    def test_mark_stale_sets_flag(self, store: CacheStore) -> None:
        store.write("v", T0)
        store.mark_stale()
        assert store.is_marked_stale() is True
        entry = store.read()
        assert entry is not None and entry.manual_stale is True

    def test_mark_stale_is_idempotent(self, store: CacheStore) -> None:
        store.write("v", T0)
        store.mark_stale()
        first = store.read()
        store.mark_stale()
        assert store.read() == first

    def test_mark_stale_without_value(self, store: CacheStore) -> None:
        store.mark_stale()
        assert store.is_marked_stale() is True
        assert store.read() is None

    def test_write_clears_flag(self, store: CacheStore) -> None:
        store.write("v", T0)
        store.mark_stale()
        store.write("w", T0)
        assert store.is_marked_stale() is False

    def test_mark_stale_keeps_value_and_timestamp(self, store: CacheStore) -> None:
        store.write("v", T0)
        store.mark_stale()
        entry = store.read()
        assert entry is not None
        assert (entry.value, entry.fetched_at) == ("v", T0)


# ------------------------------------------------------------------ #
# Concurrency
# ------------------------------------------------------------------ #


class TestConcurrency:
    def test_reads_never_observe_torn_pairs(self, store: CacheStore) -> None:
        """Each value is written with its own timestamp; readers must see matching pairs."""
        stop = threading.Event()
        torn: list[tuple] = []

        def writer(offset: int) -> None:
            i = offset
            while not stop.is_set():
                store.write(i, T0 + timedelta(seconds=i))
                i += 2

        def reader() -> None:
            for _ in range(5000):
                entry = store.read()
                if entry is not None and entry.fetched_at != T0 + timedelta(seconds=entry.value):
                    torn.append((entry.value, entry.fetched_at))

        writers = [threading.Thread(target=writer, args=(n,)) for n in (0, 1)]
        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in writers + readers:
            t.start()
        for t in readers:
            t.join()
        stop.set()
        for t in writers:
            t.join()

        assert torn == []

    def test_last_writer_wins(self, store: CacheStore) -> None:
        store.write("first", T0)
        store.write("second", T0)
        entry = store.read()
        assert entry is not None and entry.value == "second"


# ------------------------------------------------------------------ #
# Poisoning
# ------------------------------------------------------------------ #


class TestPoisoning:
    def test_failure_under_lock_poisons_store(self, store: CacheStore) -> None:
        store.write("v", T0)
        with pytest.raises(RuntimeError):
            with store._locked():
                raise RuntimeError("boom")

        assert store.is_poisoned is True
        with pytest.raises(CacheLockError, match="poisoned"):
            store.read()
        with pytest.raises(CacheLockError):
            store.mark_stale()
        with pytest.raises(CacheLockError):
            store.is_marked_stale()
        with pytest.raises(CacheLockError):
            store.write("w", T0)

    def test_poison_error_names_resource(self, store: CacheStore) -> None:
        with pytest.raises(ValueError):
            with store._locked():
                raise ValueError("boom")
        with pytest.raises(CacheLockError) as exc_info:
            store.read()
        assert exc_info.value.resource == "settings"
