# gamification/milestones.py
"""
Recurring personal milestones (weekly / monthly goals).

Lifecycle per (user, type, period_key): none → active → completed | failed.
Records are created lazily on the first action of a period, progress is
applied with F() increments, and completion is a compare-and-set so the
reward is paid exactly once.
"""
from collections import namedtuple
import logging
import math
from datetime import timedelta

from django.db.models import F, Q

from .datetime_utils import now, week_key, month_key, week_bounds, month_bounds
from .models import PointsLog, RecurringMilestone
from .points import round_half_up
from .progress import ProgressStore
from .state_machine import transition

logger = logging.getLogger("ecoact.gamification")


# What a rewarded action feeds into milestones
Contribution = namedtuple("Contribution", ["kind", "co2_kg", "is_new_active_day"])

KIND_MISSION = "mission"
KIND_COMPLIANCE = "compliance"
KIND_POLLUTION_REPORT = "pollution_report"

CompletedMilestone = namedtuple("CompletedMilestone", ["milestone", "bonus_points", "badges"])


def _co2_delta(contribution):
    return max(0.0, contribution.co2_kg or 0.0)


def _one_per_mission(contribution):
    return 1 if contribution.kind == KIND_MISSION else 0


def _one_per_active_day(contribution):
    return 1 if contribution.is_new_active_day else 0


class MilestoneType:
    def __init__(self, key, period, unit, label, icon, badge_id, extract):
        self.key = key
        self.period = period
        self.unit = unit
        # Formatted with the target value, e.g. "Save 20 kg CO2 this week"
        self.label = label
        self.icon = icon
        self.badge_id = badge_id
        self.extract = extract

    def period_for(self, current):
        """(period_key, period_start, period_end) containing current."""
        if self.period == RecurringMilestone.PERIOD_WEEKLY:
            start, end = week_bounds(current)
            return week_key(current), start, end
        start, end = month_bounds(current)
        return month_key(current), start, end

    def label_for(self, target):
        return self.label.format(target=f"{target:g}")


MILESTONE_TYPES = {
    RecurringMilestone.TYPE_WEEKLY_CO2: MilestoneType(
        RecurringMilestone.TYPE_WEEKLY_CO2, RecurringMilestone.PERIOD_WEEKLY,
        "kg", "Save {target} kg CO2 this week", "leaf", "weekly-co2-champion", _co2_delta,
    ),
    RecurringMilestone.TYPE_WEEKLY_MISSIONS: MilestoneType(
        RecurringMilestone.TYPE_WEEKLY_MISSIONS, RecurringMilestone.PERIOD_WEEKLY,
        "missions", "Complete {target} missions this week", "checkbox", "", _one_per_mission,
    ),
    RecurringMilestone.TYPE_MONTHLY_CO2: MilestoneType(
        RecurringMilestone.TYPE_MONTHLY_CO2, RecurringMilestone.PERIOD_MONTHLY,
        "kg", "Save {target} kg CO2 this month", "earth", "monthly-co2-champion", _co2_delta,
    ),
    RecurringMilestone.TYPE_MONTHLY_MISSIONS: MilestoneType(
        RecurringMilestone.TYPE_MONTHLY_MISSIONS, RecurringMilestone.PERIOD_MONTHLY,
        "missions", "Complete {target} missions this month", "checkmark-done", "mission-marathoner",
        _one_per_mission,
    ),
    RecurringMilestone.TYPE_MONTHLY_STREAK: MilestoneType(
        RecurringMilestone.TYPE_MONTHLY_STREAK, RecurringMilestone.PERIOD_MONTHLY,
        "days", "Be active on {target} days this month", "flame", "streak-keeper", _one_per_active_day,
    ),
}

# type -> tier -> (target_value, bonus_points)
MILESTONE_TEMPLATES = {
    RecurringMilestone.TYPE_WEEKLY_CO2: {"easy": (20, 100), "medium": (50, 200), "hard": (100, 400)},
    RecurringMilestone.TYPE_WEEKLY_MISSIONS: {"easy": (3, 50), "medium": (5, 100), "hard": (10, 200)},
    RecurringMilestone.TYPE_MONTHLY_CO2: {"easy": (80, 300), "medium": (200, 600), "hard": (400, 1000)},
    RecurringMilestone.TYPE_MONTHLY_MISSIONS: {"easy": (10, 150), "medium": (20, 300), "hard": (40, 600)},
    RecurringMilestone.TYPE_MONTHLY_STREAK: {"easy": (10, 200), "medium": (15, 350), "hard": (20, 500)},
}

HISTORY_MIN_LIMIT = 5
HISTORY_MAX_LIMIT = 20
SUMMARY_WINDOW_DAYS = 28


def difficulty_for_completed(completed_count: int) -> str:
    if completed_count < 4:
        return "easy"
    if completed_count < 12:
        return "medium"
    return "hard"


def percent_complete(current_value: float, target_value: float) -> int:
    if target_value <= 0:
        return 100
    return min(100, round_half_up(current_value / target_value * 100))


def days_remaining(period_end, current) -> int:
    seconds = (period_end - current).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def period_label(milestone, current) -> str:
    if milestone.period == RecurringMilestone.PERIOD_WEEKLY:
        if milestone.period_key == week_key(current):
            return "This week"
        year, week = milestone.period_key.split("-W")
        return f"Week {int(week)}, {year}"
    return milestone.period_start.strftime("%B %Y")


class MilestoneLifecycleManager:
    def __init__(self, clock=now):
        self.clock = clock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def difficulty_for(self, user) -> str:
        completed = RecurringMilestone.objects.filter(
            user=user, status=RecurringMilestone.STATUS_COMPLETED
        ).count()
        return difficulty_for_completed(completed)

    def ensure_current_period(self, user):
        """
        Insert-if-absent one active milestone per tracked type for the
        current week/month. Safe to call concurrently.
        """
        current = self.clock()
        difficulty = self.difficulty_for(user)
        milestones = []

        for mtype in MILESTONE_TYPES.values():
            period_key, period_start, period_end = mtype.period_for(current)
            target, bonus = MILESTONE_TEMPLATES[mtype.key][difficulty]
            milestone, created = RecurringMilestone.objects.upsert_if_absent(
                user,
                mtype.key,
                period_key,
                defaults={
                    "period": mtype.period,
                    "target_value": target,
                    "unit": mtype.unit,
                    "label": mtype.label_for(target),
                    "bonus_points": bonus,
                    "badge_id": mtype.badge_id,
                    "difficulty": difficulty,
                    "period_start": period_start,
                    "period_end": period_end,
                },
            )
            if created:
                logger.info(f"Milestone created: user={user.pk}, type={mtype.key}, period={period_key}")
            milestones.append(milestone)

        return milestones

    def apply_contribution(self, user, contribution):
        """
        Feed one rewarded action into every active milestone whose rule
        yields an increment. Returns the milestones this call completed.
        """
        current = self.clock()
        self.ensure_current_period(user)
        completed = []

        for milestone in RecurringMilestone.objects.find_active(user, current):
            mtype = MILESTONE_TYPES.get(milestone.type)
            if mtype is None:
                continue

            increment = mtype.extract(contribution)
            if increment <= 0:
                continue

            updated = RecurringMilestone.objects.filter(
                pk=milestone.pk, status=RecurringMilestone.STATUS_ACTIVE
            ).update(current_value=F("current_value") + increment)
            if not updated:
                continue

            milestone.refresh_from_db(fields=["current_value", "target_value", "status"])
            percent = percent_complete(milestone.current_value, milestone.target_value)
            RecurringMilestone.objects.filter(
                pk=milestone.pk, percent_complete__lt=percent
            ).update(percent_complete=percent)
            milestone.percent_complete = percent

            if milestone.current_value < milestone.target_value:
                continue

            won = transition(
                RecurringMilestone.objects,
                milestone,
                RecurringMilestone.STATUS_COMPLETED,
                guard=Q(current_value__gte=F("target_value")),
                completed_at=current,
            )
            if won:
                completed.append(self._grant_reward(user, milestone))

        return completed

    def _grant_reward(self, user, milestone):
        bonus = 0
        if ProgressStore.grant_once(
            user,
            milestone.bonus_points,
            PointsLog.REASON_MILESTONE_REWARD,
            award_key=f"milestone:{milestone.pk}",
            clock=self.clock,
        ):
            bonus = milestone.bonus_points

        badges = []
        if milestone.badge_id:
            badges = ProgressStore.add_badges(user, [milestone.badge_id], clock=self.clock)

        logger.info(
            f"Milestone completed: user={user.pk}, type={milestone.type}, "
            f"period={milestone.period_key}, bonus={bonus}"
        )
        return CompletedMilestone(milestone=milestone, bonus_points=bonus, badges=badges)

    def sweep_expired(self) -> int:
        """Mark every active milestone whose period has ended as failed."""
        count = RecurringMilestone.objects.expired(self.clock()).update(
            status=RecurringMilestone.STATUS_FAILED
        )
        if count:
            logger.info(f"Expired {count} milestones")
        return count

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def milestone_view(self, milestone, current=None):
        current = current or self.clock()
        mtype = MILESTONE_TYPES.get(milestone.type)
        return {
            "id": milestone.id,
            "type": milestone.type,
            "period": milestone.period,
            "period_key": milestone.period_key,
            "period_label": period_label(milestone, current),
            "label": milestone.label,
            "icon": mtype.icon if mtype else "leaf",
            "difficulty": milestone.difficulty,
            "progress": {
                "current_value": milestone.current_value,
                "target_value": milestone.target_value,
                "percent_complete": milestone.percent_complete,
                "unit": milestone.unit,
            },
            "reward": {
                "bonus_points": milestone.bonus_points,
                "badge_id": milestone.badge_id or None,
            },
            "status": milestone.status,
            "days_remaining": days_remaining(milestone.period_end, current),
            "period_start": milestone.period_start,
            "period_end": milestone.period_end,
            "completed_at": milestone.completed_at,
        }

    def get_active_milestones(self, user):
        current = self.clock()
        self.ensure_current_period(user)
        qs = RecurringMilestone.objects.find_active(user, current).order_by("period", "type")
        return [self.milestone_view(m, current) for m in qs]

    def get_history(self, user, page=1, limit=10):
        page = max(1, page)
        limit = min(HISTORY_MAX_LIMIT, max(HISTORY_MIN_LIMIT, limit))
        offset = (page - 1) * limit

        qs = RecurringMilestone.objects.filter(
            user=user,
            status__in=[RecurringMilestone.STATUS_COMPLETED, RecurringMilestone.STATUS_FAILED],
        ).order_by("-period_end")
        total = qs.count()
        current = self.clock()

        return {
            "milestones": [self.milestone_view(m, current) for m in qs[offset:offset + limit]],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_summary(self, user):
        since = self.clock() - timedelta(days=SUMMARY_WINDOW_DAYS)
        completed = RecurringMilestone.objects.filter(
            user=user,
            status=RecurringMilestone.STATUS_COMPLETED,
            completed_at__gte=since,
        ).count()
        failed = RecurringMilestone.objects.filter(
            user=user,
            status=RecurringMilestone.STATUS_FAILED,
            period_end__gte=since,
        ).count()
        total = completed + failed

        return {
            "completed_last_4_weeks": completed,
            "failed_last_4_weeks": failed,
            "completion_rate_percent": round_half_up(completed / total * 100) if total else 0,
            "difficulty": self.difficulty_for(user),
        }
