from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import TestCase

from gamification.milestones import (
    Contribution,
    KIND_COMPLIANCE,
    KIND_MISSION,
    MILESTONE_TYPES,
    MilestoneLifecycleManager,
)
from gamification.models import PointsLog, RecurringMilestone, UserBadge, UserProgress
from gamification.progress import ProgressStore
from gamification.state_machine import transition


User = get_user_model()

FIXED_NOW = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


class ProgressStoreTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="store", password="pass1234")

    def test_negative_delta_rejected(self):
        with self.assertRaises(ValueError):
            ProgressStore.apply_delta(self.user, points_delta=-5, clock=fixed_clock)

    def test_unknown_counter_rejected(self):
        with self.assertRaises(ValueError):
            ProgressStore.apply_delta(self.user, counters={"karma": 1}, clock=fixed_clock)

    def test_apply_delta_adds_and_tracks_longest(self):
        ProgressStore.apply_delta(self.user, points_delta=10, co2_delta=1.5, streak_value=3, clock=fixed_clock)
        progress, _ = ProgressStore.apply_delta(
            self.user, points_delta=5, co2_delta=0.5, streak_value=1,
            counters={"missions_count": 1}, clock=fixed_clock,
        )

        self.assertEqual(progress.total_points, 15)
        self.assertAlmostEqual(progress.total_co2_saved_kg, 2.0)
        self.assertEqual(progress.current_streak, 1)
        self.assertEqual(progress.longest_streak, 3)
        self.assertEqual(progress.missions_count, 1)

    def test_badges_awarded_once(self):
        _, first = ProgressStore.apply_delta(self.user, new_badges=["first-step"], clock=fixed_clock)
        _, second = ProgressStore.apply_delta(self.user, new_badges=["first-step"], clock=fixed_clock)

        self.assertEqual(first, ["first-step"])
        self.assertEqual(second, [])
        self.assertEqual(UserBadge.objects.filter(user=self.user).count(), 1)

    def test_grant_once(self):
        self.assertTrue(ProgressStore.grant_once(self.user, 50, PointsLog.REASON_STREAK_BONUS, "streak7:2024-03-13"))
        self.assertFalse(ProgressStore.grant_once(self.user, 50, PointsLog.REASON_STREAK_BONUS, "streak7:2024-03-13"))
        self.assertEqual(UserProgress.objects.get(user=self.user).total_points, 50)

    def test_refresh_streak_zeroes_lapsed_streak(self):
        UserProgress.objects.create(user=self.user, current_streak=5, longest_streak=5, last_active_date_key="2024-03-10")

        progress = ProgressStore.refresh_streak(self.user, clock=fixed_clock)

        self.assertEqual(progress.current_streak, 0)
        self.assertEqual(progress.longest_streak, 5)

    def test_refresh_streak_keeps_yesterday(self):
        UserProgress.objects.create(user=self.user, current_streak=5, last_active_date_key="2024-03-12")
        self.assertEqual(ProgressStore.refresh_streak(self.user, clock=fixed_clock).current_streak, 5)


class MilestoneLifecycleTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="milo", password="pass1234")
        self.manager = MilestoneLifecycleManager(clock=fixed_clock)

    def _weekly_co2(self, target=50, bonus=200):
        mtype = MILESTONE_TYPES[RecurringMilestone.TYPE_WEEKLY_CO2]
        period_key, start, end = mtype.period_for(FIXED_NOW)
        return RecurringMilestone.objects.create(
            user=self.user,
            type=mtype.key,
            period=mtype.period,
            period_key=period_key,
            target_value=target,
            unit=mtype.unit,
            label=mtype.label_for(target),
            bonus_points=bonus,
            badge_id=mtype.badge_id,
            difficulty="medium",
            period_start=start,
            period_end=end,
        )

    def test_ensure_current_period_is_idempotent(self):
        first = self.manager.ensure_current_period(self.user)
        second = self.manager.ensure_current_period(self.user)

        self.assertEqual(len(first), len(MILESTONE_TYPES))
        self.assertEqual({m.pk for m in first}, {m.pk for m in second})
        self.assertEqual(RecurringMilestone.objects.filter(user=self.user).count(), len(MILESTONE_TYPES))

        weekly = RecurringMilestone.objects.get(user=self.user, type=RecurringMilestone.TYPE_WEEKLY_CO2)
        self.assertEqual(weekly.period_key, "2024-W11")
        self.assertEqual(weekly.target_value, 20)
        self.assertEqual(weekly.bonus_points, 100)
        self.assertEqual(weekly.label, "Save 20 kg CO2 this week")

    def test_difficulty_scales_with_completed_history(self):
        for i in range(4):
            RecurringMilestone.objects.create(
                user=self.user, type=RecurringMilestone.TYPE_WEEKLY_CO2, period="weekly",
                period_key=f"2023-W{i + 1:02d}", target_value=20, unit="kg", label="old",
                status=RecurringMilestone.STATUS_COMPLETED,
                period_start=FIXED_NOW - timedelta(days=300), period_end=FIXED_NOW - timedelta(days=293),
            )

        self.manager.ensure_current_period(self.user)
        weekly = RecurringMilestone.objects.get(
            user=self.user, type=RecurringMilestone.TYPE_WEEKLY_CO2, period_key="2024-W11"
        )
        self.assertEqual(weekly.difficulty, "medium")
        self.assertEqual(weekly.target_value, 50)

    def test_completes_exactly_once(self):
        milestone = self._weekly_co2(target=50, bonus=200)

        for co2 in (20, 20):
            self.assertEqual(self.manager.apply_contribution(self.user, Contribution(KIND_COMPLIANCE, co2, False)), [])

        completed = self.manager.apply_contribution(self.user, Contribution(KIND_COMPLIANCE, 15, False))
        self.assertEqual(len(completed), 1)
        self.assertEqual(completed[0].milestone.pk, milestone.pk)
        self.assertEqual(completed[0].bonus_points, 200)
        self.assertEqual(completed[0].badges, ["weekly-co2-champion"])

        milestone.refresh_from_db()
        self.assertEqual(milestone.status, RecurringMilestone.STATUS_COMPLETED)
        self.assertEqual(milestone.current_value, 55)
        self.assertEqual(milestone.percent_complete, 100)
        self.assertEqual(milestone.completed_at, FIXED_NOW)

        # A completed milestone takes no further progress or reward
        self.assertEqual(self.manager.apply_contribution(self.user, Contribution(KIND_COMPLIANCE, 10, False)), [])
        milestone.refresh_from_db()
        self.assertEqual(milestone.current_value, 55)

        self.assertEqual(
            PointsLog.objects.filter(user=self.user, reason=PointsLog.REASON_MILESTONE_REWARD).count(), 1
        )
        self.assertEqual(UserProgress.objects.get(user=self.user).total_points, 200)

    def test_mission_and_streak_types_count_actions(self):
        self.manager.apply_contribution(self.user, Contribution(KIND_MISSION, 1.0, True))
        self.manager.apply_contribution(self.user, Contribution(KIND_MISSION, 1.0, False))

        weekly_missions = RecurringMilestone.objects.get(user=self.user, type=RecurringMilestone.TYPE_WEEKLY_MISSIONS)
        monthly_streak = RecurringMilestone.objects.get(user=self.user, type=RecurringMilestone.TYPE_MONTHLY_STREAK)
        self.assertEqual(weekly_missions.current_value, 2)
        self.assertEqual(weekly_missions.percent_complete, 67)
        self.assertEqual(monthly_streak.current_value, 1)

    def test_compare_and_set_has_single_winner(self):
        milestone = self._weekly_co2()
        stale = RecurringMilestone.objects.get(pk=milestone.pk)

        self.assertTrue(transition(RecurringMilestone.objects, milestone, RecurringMilestone.STATUS_COMPLETED))
        self.assertFalse(transition(RecurringMilestone.objects, stale, RecurringMilestone.STATUS_COMPLETED))
        self.assertFalse(transition(RecurringMilestone.objects, milestone, RecurringMilestone.STATUS_FAILED))

    def test_sweep_fails_past_periods_only(self):
        current = self._weekly_co2()
        past = RecurringMilestone.objects.create(
            user=self.user, type=RecurringMilestone.TYPE_WEEKLY_CO2, period="weekly",
            period_key="2024-W10", target_value=20, unit="kg", label="last week",
            period_start=FIXED_NOW - timedelta(days=9), period_end=FIXED_NOW - timedelta(days=3),
        )

        self.assertEqual(self.manager.sweep_expired(), 1)
        self.assertEqual(self.manager.sweep_expired(), 0)

        past.refresh_from_db()
        current.refresh_from_db()
        self.assertEqual(past.status, RecurringMilestone.STATUS_FAILED)
        self.assertEqual(current.status, RecurringMilestone.STATUS_ACTIVE)

    def test_active_view(self):
        self._weekly_co2()
        milestones = self.manager.get_active_milestones(self.user)

        self.assertEqual(len(milestones), len(MILESTONE_TYPES))
        weekly = next(m for m in milestones if m["type"] == RecurringMilestone.TYPE_WEEKLY_CO2)
        self.assertEqual(weekly["period_label"], "This week")
        self.assertEqual(weekly["days_remaining"], 5)
        self.assertEqual(weekly["progress"]["target_value"], 50)
        self.assertEqual(weekly["reward"]["badge_id"], "weekly-co2-champion")

    def test_history_pagination_and_summary(self):
        for i in range(7):
            RecurringMilestone.objects.create(
                user=self.user, type=RecurringMilestone.TYPE_WEEKLY_MISSIONS, period="weekly",
                period_key=f"2024-W0{i + 1}", target_value=3, unit="missions", label="past",
                status=RecurringMilestone.STATUS_COMPLETED if i % 2 else RecurringMilestone.STATUS_FAILED,
                period_start=FIXED_NOW - timedelta(days=7 * (6 - i) + 8),
                period_end=FIXED_NOW - timedelta(days=7 * (6 - i) + 1),
                completed_at=FIXED_NOW - timedelta(days=7 * (6 - i) + 2) if i % 2 else None,
            )

        history = self.manager.get_history(self.user, page=1, limit=2)
        self.assertEqual(history["pagination"], {"page": 1, "limit": 5, "total": 7, "pages": 2})
        self.assertEqual(len(history["milestones"]), 5)
        self.assertEqual(history["milestones"][0]["period_key"], "2024-W07")

        second = self.manager.get_history(self.user, page=2, limit=50)
        self.assertEqual(second["pagination"]["limit"], 20)
        self.assertEqual(second["milestones"], [])

        summary = self.manager.get_summary(self.user)
        # Inside the 28 day window: i=3 and i=5 completed, i=4 and i=6 failed
        self.assertEqual(summary["completed_last_4_weeks"], 2)
        self.assertEqual(summary["failed_last_4_weeks"], 2)
        self.assertEqual(summary["completion_rate_percent"], 50)
        self.assertEqual(summary["difficulty"], "easy")
