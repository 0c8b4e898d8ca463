# gamification/engine.py
"""
RewardsEngine: turns one user action into updated progress.

Every rewarded action runs the same pipeline inside one transaction:

    lock UserProgress → streak → points → insert action record
    → progress delta → flat bonuses → badges → milestones
    → community challenge → (after commit) feed + notifications

Each step is idempotent (unique constraints, compare-and-set, F() updates)
so a retried request converges instead of double paying.
"""
from collections import namedtuple
from functools import partial
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from core.constants import (
    ACTIVITY_BADGE_EARNED,
    ACTIVITY_COMPLIANCE_LOGGED,
    ACTIVITY_MILESTONE_COMPLETED,
    ACTIVITY_MISSION_COMPLETED,
    ACTIVITY_POLLUTION_REPORTED,
)
from core.models import Community
from core.services import ActivityFeed, get_active_community_id_for_user
from notifications.models import Notification
from notifications.services import send_push_notification

from . import points as points_rules
from .badges import badge_label, newly_earned
from .challenges import ChallengeContributionAggregator
from .conf import get_setting
from .datetime_utils import now, date_key, day_bounds, seconds_until_next_day
from .exceptions import AlreadyCompleted, RateLimited, TransientStoreFailure
from .milestones import (
    Contribution,
    KIND_COMPLIANCE,
    KIND_MISSION,
    KIND_POLLUTION_REPORT,
    MilestoneLifecycleManager,
)
from .models import PointsLog
from .progress import ProgressStore
from .streaks import is_new_active_day, next_streak

logger = logging.getLogger("ecoact.gamification")


ActionOutcome = namedtuple(
    "ActionOutcome",
    [
        "record",
        "points",
        "bonus_points",
        "streak",
        "progress",
        "badges",
        "milestones",
        "challenge",
        "challenge_completed",
    ],
)


class RewardsEngine:
    def __init__(self, clock=now):
        self.clock = clock
        self.milestones = MilestoneLifecycleManager(clock=clock)
        self.challenges = ChallengeContributionAggregator(clock=clock)

    # ------------------------------------------------------------------
    # Exposed operations
    # ------------------------------------------------------------------
    def complete_mission(self, user, mission_id):
        from missions.models import Mission, MissionCompletion

        mission = Mission.objects.get(pk=mission_id, is_active=True)

        def compute_points(streak):
            return points_rules.points(mission.base_points, mission.co2_saved_kg, mission.difficulty, streak)

        def create_record(points_awarded, current, today):
            return MissionCompletion.objects.create(
                user=user,
                mission=mission,
                points_awarded=points_awarded,
                co2_saved_awarded=mission.co2_saved_kg,
                date_key=today,
                completed_at=current,
            )

        outcome = self._apply_action(
            user,
            kind=KIND_MISSION,
            reason=PointsLog.REASON_MISSION,
            award_key=f"mission:{mission.pk}",
            compute_points=compute_points,
            co2_kg=mission.co2_saved_kg,
            create_record=create_record,
            counters={"missions_count": 1},
            duplicate_error=AlreadyCompleted,
            extra_bonus=self._daily_tier_bonus,
            activity=(ACTIVITY_MISSION_COMPLETED, {
                "mission_id": mission.pk,
                "mission_title": mission.title,
                "category": mission.category,
                "co2_saved_kg": mission.co2_saved_kg,
            }),
        )

        result = self._summary(outcome)
        result.update({
            "mission_id": mission.pk,
            "co2_saved_awarded": mission.co2_saved_kg,
            "streak_multiplier": points_rules.streak_multiplier(outcome.streak),
        })
        return result

    def log_compliance_event(self, user, context_id, co2_impact_kg, is_on_time,
                             test_date=None, expiry_date=None, **details):
        """
        context_id is the vehicle the certificate belongs to. Eligibility
        (exempt vehicle classes) is checked by the caller before this runs.
        """
        from compliance.models import ComplianceRecord
        from compliance.rules import DEFAULT_VALIDITY_MONTHS, compute_expiry_date

        def compute_points(streak):
            recent = list(
                ComplianceRecord.objects
                .filter(user=user, vehicle_id=context_id)
                .order_by("-test_date", "-created_at")
                .values_list("is_on_time", flat=True)[:2]
            )
            previous_on_time = 0
            for on_time in recent:
                if not on_time:
                    break
                previous_on_time += 1
            return points_rules.compliance_points(is_on_time, previous_on_time)

        def create_record(points_awarded, current, today):
            tested = test_date or current.date()
            return ComplianceRecord.objects.create(
                vehicle_id=context_id,
                user=user,
                test_date=tested,
                expiry_date=expiry_date or compute_expiry_date(tested, DEFAULT_VALIDITY_MONTHS),
                points_awarded=points_awarded,
                co2_impact_kg=co2_impact_kg,
                is_on_time=is_on_time,
                **details,
            )

        outcome = self._apply_action(
            user,
            kind=KIND_COMPLIANCE,
            reason=PointsLog.REASON_COMPLIANCE,
            award_key=None,
            compute_points=compute_points,
            co2_kg=co2_impact_kg,
            create_record=create_record,
            counters={"compliance_on_time_count": 1} if is_on_time else None,
            activity=(ACTIVITY_COMPLIANCE_LOGGED, {
                "vehicle_id": context_id,
                "co2_impact_kg": co2_impact_kg,
                "is_on_time": is_on_time,
            }),
        )

        result = self._summary(outcome)
        result.update({
            "record_id": outcome.record.pk,
            "co2_impact_kg": co2_impact_kg,
            "is_on_time": is_on_time,
            "expiry_date": outcome.record.expiry_date,
        })
        return result

    def submit_pollution_report(self, user, pollution_level, estimated_impact_kg=0, **report_fields):
        """
        Reports earn points by severity but no personal CO2 credit.
        Capped per user per UTC day.
        """
        from compliance.models import PollutionReport

        limit = get_setting("DAILY_REPORT_LIMIT")

        def precheck(current, today):
            start, end = day_bounds(current)
            count = PollutionReport.objects.filter(
                reporter=user, reported_at__gte=start, reported_at__lt=end
            ).count()
            if count >= limit:
                raise RateLimited(
                    detail=f"Daily limit of {limit} reports reached. Try again tomorrow.",
                    retry_after=seconds_until_next_day(current),
                )

        def create_record(points_awarded, current, today):
            return PollutionReport.objects.create(
                reporter=user,
                pollution_level=pollution_level,
                points_awarded=points_awarded,
                estimated_impact_kg=estimated_impact_kg,
                date_key=today,
                reported_at=current,
                **report_fields,
            )

        outcome = self._apply_action(
            user,
            kind=KIND_POLLUTION_REPORT,
            reason=PointsLog.REASON_POLLUTION_REPORT,
            award_key=None,
            compute_points=lambda streak: points_rules.report_points(pollution_level),
            co2_kg=0.0,
            create_record=create_record,
            counters={"pollution_report_count": 1},
            precheck=precheck,
            activity=(ACTIVITY_POLLUTION_REPORTED, {
                "pollution_level": pollution_level,
                "city": report_fields.get("city", ""),
            }),
        )

        result = self._summary(outcome)
        result.update({
            "report_id": outcome.record.pk,
            "pollution_level": pollution_level,
        })
        return result

    def get_active_milestones(self, user):
        return self.milestones.get_active_milestones(user)

    def sweep_expirations(self):
        try:
            with transaction.atomic():
                milestones_expired = self.milestones.sweep_expired()
                challenges_expired = self.challenges.sweep_expired()
        except DatabaseError as e:
            logger.error(f"Expiry sweep failed: {e}")
            raise TransientStoreFailure() from e

        logger.info(f"Expiry sweep: milestones={milestones_expired}, challenges={challenges_expired}")
        return {
            "milestones_expired": milestones_expired,
            "challenges_expired": challenges_expired,
        }

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _apply_action(self, user, kind, reason, award_key, compute_points, co2_kg, create_record,
                      counters=None, duplicate_error=None, precheck=None, extra_bonus=None, activity=None):
        try:
            with transaction.atomic():
                return self._run_pipeline(
                    user, kind, reason, award_key, compute_points, co2_kg, create_record,
                    counters, duplicate_error, precheck, extra_bonus, activity,
                )
        except DatabaseError as e:
            logger.error(f"Progress store failure for user {user.pk} ({kind}): {e}")
            raise TransientStoreFailure() from e

    def _run_pipeline(self, user, kind, reason, award_key, compute_points, co2_kg, create_record,
                      counters, duplicate_error, precheck, extra_bonus, activity):
        current = self.clock()
        today = date_key(current)

        # Serializes actions of the same user (two devices, double taps)
        progress = ProgressStore.load(user, lock=True)
        if precheck is not None:
            precheck(current, today)

        previous_streak = progress.current_streak
        streak = next_streak(previous_streak, progress.last_active_date_key, today)
        new_day = is_new_active_day(progress.last_active_date_key, today)

        points = compute_points(streak)

        try:
            with transaction.atomic():
                record = create_record(points, current, today)
        except IntegrityError:
            if duplicate_error is None:
                raise
            raise duplicate_error() from None

        ProgressStore.record_points(user, points, reason, award_key=award_key)
        ProgressStore.apply_delta(
            user,
            points_delta=points,
            co2_delta=co2_kg,
            streak_value=streak,
            last_active_date_key=today,
            counters=counters,
            clock=self.clock,
        )

        bonus = 0
        if points_rules.crossed_streak_bonus(previous_streak, streak):
            amount = points_rules.streak_bonus_points()
            if ProgressStore.grant_once(user, amount, PointsLog.REASON_STREAK_BONUS, f"streak7:{today}", clock=self.clock):
                bonus += amount
        if extra_bonus is not None:
            bonus += extra_bonus(user, today)

        community_id = get_active_community_id_for_user(user)

        progress = ProgressStore.load(user)
        earned = newly_earned(progress.snapshot(has_community=community_id is not None), progress.badges)
        badges = ProgressStore.add_badges(user, earned, clock=self.clock)

        completed = self.milestones.apply_contribution(user, Contribution(kind, co2_kg, new_day))
        for item in completed:
            bonus += item.bonus_points
            badges.extend(b for b in item.badges if b not in badges)

        challenge, challenge_completed = None, False
        if community_id is not None:
            community = Community.objects.get(pk=community_id)
            self.challenges.ensure_active(community)
            challenge, challenge_completed = self.challenges.apply_contribution(community, co2_kg, user=user)
            Community.objects.filter(pk=community_id).update(
                total_co2_saved_kg=F("total_co2_saved_kg") + co2_kg,
                total_points=F("total_points") + points + bonus,
            )

        progress = ProgressStore.load(user)

        logger.info(
            f"Rewarded {kind}: user={user.pk}, points={points}, bonus={bonus}, co2={co2_kg}, "
            f"streak={streak}, badges={badges}, milestones={len(completed)}"
        )

        self._publish(user, community_id, activity, badges, completed,
                      challenge=challenge if challenge_completed else None)

        return ActionOutcome(
            record=record,
            points=points,
            bonus_points=bonus,
            streak=streak,
            progress=progress,
            badges=badges,
            milestones=completed,
            challenge=challenge,
            challenge_completed=challenge_completed,
        )

    def _daily_tier_bonus(self, user, today):
        from missions.services import is_daily_pool_completed

        if not is_daily_pool_completed(user, today):
            return 0
        amount = points_rules.daily_tier_bonus_points()
        if ProgressStore.grant_once(user, amount, PointsLog.REASON_DAILY_TIER_BONUS, today, clock=self.clock):
            return amount
        return 0

    def _publish(self, user, community_id, activity, badges, completed, challenge=None):
        """Feed entries and notifications, all deferred until commit."""
        if activity is not None:
            verb, metadata = activity
            ActivityFeed.append(community_id, verb, actor=user, metadata=metadata)

        for badge_id in badges:
            label = badge_label(badge_id)
            ActivityFeed.append(community_id, ACTIVITY_BADGE_EARNED, actor=user, metadata={
                "badge_id": badge_id,
                "badge_label": label,
            })
            transaction.on_commit(partial(
                send_push_notification,
                user,
                "New badge unlocked!",
                f"You earned the {label} badge.",
                data={"screen": "profile", "badge_id": badge_id},
                notification_type=Notification.TYPE_BADGE_EARNED,
            ))

        for item in completed:
            milestone = item.milestone
            ActivityFeed.append(community_id, ACTIVITY_MILESTONE_COMPLETED, actor=user, metadata={
                "milestone_id": milestone.pk,
                "label": milestone.label,
                "target_value": milestone.target_value,
                "unit": milestone.unit,
            })
            transaction.on_commit(partial(
                send_push_notification,
                user,
                "Milestone complete!",
                f"{milestone.label}: +{item.bonus_points} bonus points.",
                data={"screen": "milestones", "milestone_id": milestone.pk},
                notification_type=Notification.TYPE_MILESTONE_COMPLETED,
            ))

        if challenge is not None:
            for participant in challenge.participants.select_related("user"):
                transaction.on_commit(partial(
                    send_push_notification,
                    participant.user,
                    "Community challenge complete!",
                    f"{challenge.title}: {challenge.current_co2_kg:g} kg CO2 saved together.",
                    data={"screen": "community", "challenge_id": challenge.pk},
                    notification_type=Notification.TYPE_CHALLENGE_COMPLETED,
                ))

    @staticmethod
    def _summary(outcome):
        progress = outcome.progress
        return {
            "points_awarded": outcome.points,
            "bonus_points_awarded": outcome.bonus_points,
            "new_total_points": progress.total_points,
            "new_total_co2_saved": progress.total_co2_saved_kg,
            "current_streak": progress.current_streak,
            "longest_streak": progress.longest_streak,
            "newly_earned_badges": list(outcome.badges),
            "completed_milestones": [item.milestone.pk for item in outcome.milestones],
            "challenge_completed": outcome.challenge_completed,
        }
