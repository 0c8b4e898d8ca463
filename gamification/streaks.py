# gamification/streaks.py
"""
Streak rules over UTC calendar-day keys (YYYY-MM-DD).

A streak is the number of consecutive days with at least one rewarded
action. Same-day actions never move it.
"""
from typing import Optional

from .datetime_utils import parse_date_key


def _days_between(earlier_key: str, later_key: str) -> Optional[int]:
    earlier = parse_date_key(earlier_key)
    later = parse_date_key(later_key)
    if earlier is None or later is None:
        return None
    return (later - earlier).days


def next_streak(previous_streak: int, last_completion_date_key: Optional[str], today_date_key: str) -> int:
    if not last_completion_date_key:
        return 1

    if last_completion_date_key == today_date_key:
        return previous_streak

    if _days_between(last_completion_date_key, today_date_key) == 1:
        return previous_streak + 1

    return 1


def should_reset(streak: int, last_completion_date_key: Optional[str], today_date_key: str) -> bool:
    """
    Read-only check used when the app opens: is the stored streak already broken?
    """
    if streak <= 0 or not last_completion_date_key:
        return False
    if last_completion_date_key == today_date_key:
        return False
    return _days_between(last_completion_date_key, today_date_key) != 1


def longest_streak(previous_longest: int, new_streak: int) -> int:
    return max(previous_longest or 0, new_streak)


def is_new_active_day(last_completion_date_key: Optional[str], today_date_key: str) -> bool:
    return last_completion_date_key != today_date_key
