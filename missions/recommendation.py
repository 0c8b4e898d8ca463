# missions/recommendation.py
"""
Daily mission suggestions.

Pure functions: they take plain inputs (a signal, a catalog, recent ids)
and never touch the database, so the same inputs always give the same pool.
"""
from .models import Mission

CAR_KM_THRESHOLD = 15
AC_HOURS_THRESHOLD = 4

DEFAULT_CATEGORY = Mission.CATEGORY_TRANSPORT

TIERS = (
    Mission.DIFFICULTY_EASY,
    Mission.DIFFICULTY_MEDIUM,
    Mission.DIFFICULTY_HARD,
)


def dominant_category(breakdown):
    """Highest-emitting category of a footprint breakdown."""
    if not breakdown:
        return DEFAULT_CATEGORY
    valid = {
        category: value
        for category, value in breakdown.items()
        if category in dict(Mission.CATEGORY_CHOICES) and isinstance(value, (int, float))
    }
    if not valid:
        return DEFAULT_CATEGORY
    return max(valid, key=valid.get)


def category_from_signal(signal):
    if signal is None:
        return None
    if (signal.car_km or 0) > CAR_KM_THRESHOLD:
        return Mission.CATEGORY_TRANSPORT
    if signal.food_type == "non_veg":
        return Mission.CATEGORY_FOOD
    if (signal.ac_hours or 0) > AC_HOURS_THRESHOLD:
        return Mission.CATEGORY_ENERGY
    return None


def preferred_category(signal, dominant=None):
    return category_from_signal(signal) or dominant or DEFAULT_CATEGORY


def pick_mission(tier_missions, preferred, recent_ids):
    matches = [m for m in tier_missions if m.category == preferred]
    fresh = [m for m in matches if m.id not in recent_ids]

    if fresh:
        return fresh[0]
    if matches:
        return matches[0]
    return tier_missions[0]


def generate_daily_missions(catalog, preferred, recent_ids=()):
    """
    One mission per difficulty tier, in easy/medium/hard order.
    Catalog order (by id) breaks ties; tiers with no missions are skipped.
    """
    recent = set(recent_ids)
    ordered = sorted(catalog, key=lambda m: m.id)
    pool = []

    for tier in TIERS:
        tier_missions = [m for m in ordered if m.difficulty == tier]
        if not tier_missions:
            continue
        pool.append(pick_mission(tier_missions, preferred, recent))

    return pool
