from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_month(value: str) -> date:
    """Parse YYYY-MM into the first day of that month."""
    return datetime.strptime(value, "%Y-%m").date()


def utc_now() -> datetime:
    """Current instant in UTC.

    Note: only the HTTP layer calls this; services receive `now` as an argument.
    """
    return datetime.now(timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def office_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar day of `instant` in the office timezone (the attendance day key)."""
    return ensure_utc(instant).astimezone(tz).date()


def first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def to_rfc3339(instant: Optional[datetime]) -> Optional[str]:
    if instant is None:
        return None
    return ensure_utc(instant).strftime("%Y-%m-%dT%H:%M:%SZ")
