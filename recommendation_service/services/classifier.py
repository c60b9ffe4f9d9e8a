from __future__ import annotations

from datetime import datetime, timedelta

from recommendation_service.schemas.recommendation import Priority, Recommendation
from recommendation_service.utils.time import to_utc_aware


RECENT_DAYS = 7
MONTHLY_DAYS = 30


def age(rec: Recommendation, now: datetime) -> timedelta:
    """Exact elapsed time since creation. Negative for future-dated records."""
    return to_utc_aware(now) - rec.created_at


def within_days(rec: Recommendation, now: datetime, days: int) -> bool:
    try:
        window = timedelta(days=days)
    except OverflowError:
        # wider than any representable age
        return True
    # inclusive: an age of exactly days*24h is inside the window
    return age(rec, now) <= window


def is_recent(rec: Recommendation, now: datetime, days: int = RECENT_DAYS) -> bool:
    return within_days(rec, now, days)


def is_monthly(rec: Recommendation, now: datetime, days: int = MONTHLY_DAYS) -> bool:
    return within_days(rec, now, days)


def is_high_priority(rec: Recommendation) -> bool:
    return rec.priority is Priority.HIGH


def is_critical(rec: Recommendation) -> bool:
    return rec.priority is Priority.CRITICAL
