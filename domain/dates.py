"""
Date/time helpers.

Timestamps are timezone-aware UTC throughout the application. Backends that
drop the offset on storage (SQLite) hand back naive values, which are read
as UTC.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a datetime from a datetime, date, or ISO-8601 string.

    Returns None for empty or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_aware(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the first and last instant of a calendar day in UTC."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(day, time.max, tzinfo=timezone.utc)
    return start, end


def days_since(value: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Whole days elapsed since ``value``; infinity when there is no date."""
    if value is None:
        return float("inf")
    now = now or utcnow()
    return float((now - ensure_aware(value)).days)
