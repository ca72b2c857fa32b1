"""
Date/time helpers — framework-agnostic.

MongoDB stores datetimes as naive UTC; the client is opened with
``tz_aware=True`` but documents built in memory or loaded from older data may
still be naive. ``ensure_utc`` normalises both so expiry comparisons never mix
aware and naive values.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    Naive datetimes (no ``tzinfo``) are assumed to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_in(seconds: int, *, now: Optional[datetime] = None) -> datetime:
    """Return the UTC instant *seconds* after *now* (default: current time)."""
    return (now or utcnow()) + timedelta(seconds=seconds)
