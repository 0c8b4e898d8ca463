# gamification/progress.py
import logging

from django.db import IntegrityError, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest

from .datetime_utils import now, date_key
from .models import PointsLog, UserBadge, UserProgress
from .streaks import should_reset

logger = logging.getLogger("ecoact.gamification")

COUNTER_FIELDS = (
    "missions_count",
    "compliance_on_time_count",
    "pollution_report_count",
)


class ProgressStore:
    """
    Per-user aggregate store.

    Every write is an additive F() update or a set-add, never
    "read the total then write the total".
    """

    @staticmethod
    def load(user, lock=False) -> UserProgress:
        progress, _ = UserProgress.objects.get_or_create(user=user)
        if lock:
            progress = UserProgress.objects.select_for_update().get(pk=progress.pk)
        return progress

    @staticmethod
    def apply_delta(
        user,
        points_delta=0,
        co2_delta=0.0,
        streak_value=None,
        last_active_date_key=None,
        counters=None,
        new_badges=(),
        clock=now,
    ):
        """
        Atomically add to the user's totals and award badges.

        Returns (progress, awarded_badge_ids) where awarded_badge_ids holds
        only the badges this call actually inserted.
        """
        if points_delta < 0 or co2_delta < 0:
            raise ValueError("Progress totals never decrease")

        ProgressStore.load(user)

        updates = {}
        if points_delta:
            updates["total_points"] = F("total_points") + points_delta
        if co2_delta:
            updates["total_co2_saved_kg"] = F("total_co2_saved_kg") + co2_delta
        if streak_value is not None:
            updates["current_streak"] = streak_value
            updates["longest_streak"] = Greatest(F("longest_streak"), Value(streak_value))
        if last_active_date_key:
            updates["last_active_date_key"] = last_active_date_key
        for name, increment in (counters or {}).items():
            if name not in COUNTER_FIELDS:
                raise ValueError(f"Unknown progress counter: {name}")
            updates[name] = F(name) + increment

        with transaction.atomic():
            if updates:
                updates["updated_at"] = clock()
                UserProgress.objects.filter(user=user).update(**updates)
            awarded = ProgressStore.add_badges(user, new_badges, clock=clock)

        return UserProgress.objects.get(user=user), awarded

    @staticmethod
    def add_badges(user, badge_ids, clock=now):
        awarded = []
        for badge_id in sorted(set(badge_ids)):
            _, created = UserBadge.objects.get_or_create(
                user=user,
                badge_id=badge_id,
                defaults={"earned_at": clock()},
            )
            if created:
                awarded.append(badge_id)
                logger.info(f"Badge awarded: user={user.pk}, badge={badge_id}")
        return awarded

    @staticmethod
    def record_points(user, amount, reason, award_key=None) -> bool:
        """
        Ledger entry for a point grant. With an award_key the grant is paid at
        most once; a duplicate returns False and nothing is written.
        """
        try:
            with transaction.atomic():
                PointsLog.objects.create(user=user, amount=amount, reason=reason, award_key=award_key)
        except IntegrityError:
            logger.info(f"Duplicate award skipped: user={user.pk}, reason={reason}, key={award_key}")
            return False
        return True

    @staticmethod
    def grant_once(user, amount, reason, award_key, clock=now) -> bool:
        """Flat bonus paid at most once per (user, reason, award_key)."""
        if amount <= 0:
            return False
        if not ProgressStore.record_points(user, amount, reason, award_key=award_key):
            return False
        ProgressStore.apply_delta(user, points_delta=amount, clock=clock)
        logger.info(f"Bonus granted: user={user.pk}, +{amount} ({reason}:{award_key})")
        return True

    @staticmethod
    def refresh_streak(user, clock=now) -> UserProgress:
        """
        Zero a streak that is already broken (no action yesterday or today).
        Guarded on the values read so a concurrent action is never undone.
        """
        progress = ProgressStore.load(user)
        today = date_key(clock())
        if should_reset(progress.current_streak, progress.last_active_date_key, today):
            UserProgress.objects.filter(
                pk=progress.pk,
                current_streak=progress.current_streak,
                last_active_date_key=progress.last_active_date_key,
            ).update(current_streak=0)
            progress.refresh_from_db()
            logger.info(f"Streak reset on refresh: user={user.pk}")
        return progress
