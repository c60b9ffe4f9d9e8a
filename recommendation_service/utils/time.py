"""
Canonical timestamp normalization for the recommendation store.
All reads that compare or bucket timestamps should go through to_utc_aware.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse


def now_utc() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc_aware(ts: Any) -> datetime:
    """
    Convert a timestamp (string/datetime) to a timezone-aware UTC datetime.
    - naive datetime -> assume UTC
    - iso string without tz -> assume UTC
    - iso string with tz -> convert to UTC
    """
    if ts is None:
        raise ValueError("timestamp is required")

    if isinstance(ts, datetime):
        dt = ts
    else:
        dt = isoparse(str(ts).strip())

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_naive(ts: Any) -> datetime:
    """Normalize to UTC and drop tzinfo, the form stored in DateTime columns."""
    return to_utc_aware(ts).replace(tzinfo=None)
