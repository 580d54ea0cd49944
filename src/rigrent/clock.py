"""Time source and calendar-day helpers.

Every instant handled by the service is a timezone-aware UTC datetime.
Day buckets are UTC calendar days.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns them naive), convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime | date) -> datetime:
    """00:00:00.000000 UTC of the day containing dt."""
    d = ensure_utc(dt).date() if isinstance(dt, datetime) else dt
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def end_of_day(dt: datetime | date) -> datetime:
    """23:59:59.999999 UTC of the day containing dt."""
    d = ensure_utc(dt).date() if isinstance(dt, datetime) else dt
    return datetime.combine(d, time.max, tzinfo=timezone.utc)


def day_bucket(now: datetime, days_ahead: int) -> tuple[datetime, datetime]:
    """Get (start, end) of the calendar day exactly ``days_ahead`` days after now.

    This is a single 24-hour bucket, not a rolling "within N days" range:
    2026-03-01 15:00 with days_ahead=7 gives 2026-03-08 00:00 .. 23:59:59.999999.
    """
    target = ensure_utc(now) + timedelta(days=days_ahead)
    return start_of_day(target), end_of_day(target)
