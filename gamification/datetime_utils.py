# gamification/datetime_utils.py
"""
Centralized datetime handling for the rewards engine.

Streak days, milestone periods and report limits are all UTC calendar
buckets. Every helper takes an optional ``current`` datetime so callers can
inject a clock in tests.
"""
import calendar
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Optional, Tuple
from django.utils import timezone


def now() -> datetime:
    """
    Get current datetime (timezone-aware, UTC).

    This is the single source of truth for "now" in the engine.
    """
    return timezone.now()


def _utc(dt: Optional[datetime]) -> datetime:
    if dt is None:
        dt = now()
    if timezone.is_naive(dt):
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def date_key(current: Optional[datetime] = None) -> str:
    """UTC calendar day as ``YYYY-MM-DD``."""
    return _utc(current).date().isoformat()


def parse_date_key(key: Optional[str]) -> Optional[date]:
    if not key:
        return None
    try:
        return date.fromisoformat(key)
    except ValueError:
        return None


def week_key(current: Optional[datetime] = None) -> str:
    """ISO week key, e.g. ``2024-W07``."""
    iso_year, iso_week, _ = _utc(current).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(current: Optional[datetime] = None) -> str:
    """Calendar month key, e.g. ``2024-03``."""
    dt = _utc(current)
    return f"{dt.year}-{dt.month:02d}"


def _start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=dt_timezone.utc)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max, tzinfo=dt_timezone.utc)


def week_bounds(current: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999999 (UTC) of the ISO week."""
    day = _utc(current).date()
    monday = day - timedelta(days=day.weekday())
    return _start_of_day(monday), _end_of_day(monday + timedelta(days=6))


def month_bounds(current: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First to last day of the calendar month (UTC), end inclusive."""
    day = _utc(current).date()
    last = calendar.monthrange(day.year, day.month)[1]
    return _start_of_day(day.replace(day=1)), _end_of_day(day.replace(day=last))


def next_midnight(current: Optional[datetime] = None) -> datetime:
    return _start_of_day(_utc(current).date() + timedelta(days=1))


def seconds_until_next_day(current: Optional[datetime] = None) -> int:
    """Whole seconds until the next UTC day boundary (at least 1)."""
    current = _utc(current)
    return max(1, int((next_midnight(current) - current).total_seconds()))


def day_bounds(current: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    day = _utc(current).date()
    return _start_of_day(day), next_midnight(current)


def add_months(d: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of short months."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
