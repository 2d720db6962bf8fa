"""Freshness computation for cached values.

Pure functions only: nothing here reads the clock by itself or touches any
state, so callers pass ``now`` explicitly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Default clock used by resource handles."""
    return datetime.now(timezone.utc)


def elapsed_since(last_fetched_at: datetime, now: datetime) -> timedelta:
    """Time elapsed between two instants, saturated at zero.

    A clock adjusted backwards yields a negative difference, which is
    reported as zero elapsed time.
    """
    elapsed = now - last_fetched_at
    if elapsed < timedelta(0):
        return timedelta(0)
    return elapsed


def is_fresh(
    has_value: bool,
    manual_stale: bool,
    last_fetched_at: Optional[datetime],
    ttl: Optional[timedelta],
    now: datetime,
) -> bool:
    """Return the freshness verdict for a cached value.

    * no value -- stale
    * manual-stale flag set -- stale
    * no ttl -- fresh, whatever the age
    * otherwise fresh iff ``now - last_fetched_at < ttl``

    A ttl of zero is therefore stale from the instant of fetch.
    """
    if not has_value or last_fetched_at is None:
        return False
    if manual_stale:
        return False
    if ttl is None:
        return True
    return elapsed_since(last_fetched_at, now) < ttl
