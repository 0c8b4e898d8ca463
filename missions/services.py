# missions/services.py
import logging

from gamification.conf import get_setting
from gamification.datetime_utils import now, date_key

from .models import DailyMissionPool, DailySignal, FootprintLog, Mission, MissionCompletion
from .recommendation import dominant_category, generate_daily_missions, preferred_category

logger = logging.getLogger("ecoact.missions")


def get_recent_mission_ids(user, limit=None):
    limit = limit or get_setting("RECENT_MISSION_WINDOW")
    return list(
        MissionCompletion.objects
        .filter(user=user)
        .order_by("-completed_at")
        .values_list("mission_id", flat=True)[:limit]
    )


def get_dominant_category(user):
    latest = FootprintLog.objects.filter(user=user).order_by("-logged_at").first()
    return dominant_category(latest.breakdown if latest else None)


def get_daily_signal(user, day_key):
    return DailySignal.objects.filter(user=user, date_key=day_key).first()


def record_daily_signal(user, car_km=0, food_type="", ac_hours=0, clock=now):
    signal, _ = DailySignal.objects.update_or_create(
        user=user,
        date_key=date_key(clock()),
        defaults={
            "car_km": car_km or 0,
            "food_type": food_type or "",
            "ac_hours": ac_hours or 0,
        },
    )
    return signal


def _pool_missions(pool):
    by_id = Mission.objects.in_bulk(pool.mission_ids)
    return [by_id[pk] for pk in pool.mission_ids if pk in by_id]


def get_daily_pool(user, clock=now):
    """
    Today's suggestions for the user, generated on the first call of the
    UTC day and served from DailyMissionPool afterwards.

    Returns (pool, missions).
    """
    current = clock()
    today = date_key(current)

    pool = DailyMissionPool.objects.filter(user=user, date_key=today).first()
    if pool is not None:
        return pool, _pool_missions(pool)

    preferred = preferred_category(get_daily_signal(user, today), get_dominant_category(user))
    # Missions are one-time, a completed one can never be finished again
    done_ids = MissionCompletion.objects.filter(user=user).values("mission_id")
    catalog = list(Mission.objects.filter(is_active=True).exclude(pk__in=done_ids))
    missions = generate_daily_missions(catalog, preferred, get_recent_mission_ids(user))

    pool, created = DailyMissionPool.objects.get_or_create(
        user=user,
        date_key=today,
        defaults={
            "preferred_category": preferred,
            "mission_ids": [m.id for m in missions],
            "generated_at": current,
        },
    )
    if created:
        logger.info(f"Daily pool generated: user={user.pk}, day={today}, category={preferred}, missions={pool.mission_ids}")
    return pool, _pool_missions(pool)


def is_daily_pool_completed(user, day_key) -> bool:
    """True when every mission in the user's pool for day_key was completed that day."""
    pool = DailyMissionPool.objects.filter(user=user, date_key=day_key).first()
    if pool is None or not pool.mission_ids:
        return False
    done = MissionCompletion.objects.filter(
        user=user,
        date_key=day_key,
        mission_id__in=pool.mission_ids,
    ).count()
    return done == len(set(pool.mission_ids))
