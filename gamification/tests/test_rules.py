from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from gamification import points
from gamification.badges import BADGE_CATALOG, StatSnapshot, newly_earned
from gamification.challenges import progress_percent, time_remaining
from gamification.datetime_utils import (
    add_months,
    date_key,
    month_bounds,
    month_key,
    seconds_until_next_day,
    week_bounds,
    week_key,
)
from gamification.milestones import days_remaining, difficulty_for_completed, percent_complete
from gamification.state_machine import can_transition, is_terminal_status
from gamification.streaks import is_new_active_day, longest_streak, next_streak, should_reset


def _snapshot(**overrides):
    values = {
        "total_co2_saved_kg": 0,
        "missions_count": 0,
        "current_streak": 0,
        "has_community": False,
        "compliance_on_time_count": 0,
        "pollution_report_count": 0,
    }
    values.update(overrides)
    return StatSnapshot(**values)


class StreakRulesTestCase(SimpleTestCase):
    def test_first_action_starts_streak(self):
        self.assertEqual(next_streak(0, None, "2024-03-13"), 1)

    def test_consecutive_day_extends(self):
        self.assertEqual(next_streak(4, "2024-03-12", "2024-03-13"), 5)

    def test_same_day_keeps_streak(self):
        self.assertEqual(next_streak(4, "2024-03-13", "2024-03-13"), 4)

    def test_gap_restarts(self):
        self.assertEqual(next_streak(9, "2024-03-10", "2024-03-13"), 1)

    def test_month_and_leap_day_boundary(self):
        self.assertEqual(next_streak(3, "2024-02-29", "2024-03-01"), 4)
        self.assertEqual(next_streak(3, "2023-12-31", "2024-01-01"), 4)

    def test_should_reset(self):
        self.assertTrue(should_reset(4, "2024-03-11", "2024-03-13"))
        self.assertFalse(should_reset(4, "2024-03-12", "2024-03-13"))
        self.assertFalse(should_reset(4, "2024-03-13", "2024-03-13"))
        self.assertFalse(should_reset(0, "2024-03-01", "2024-03-13"))
        self.assertFalse(should_reset(3, None, "2024-03-13"))

    def test_day_by_day_sequence(self):
        keys = ["2024-03-01", "2024-03-01", "2024-03-02", "2024-03-03", "2024-03-03", "2024-03-05", "2024-03-06"]
        streak, last, seen = 0, None, []
        for key in keys:
            streak = next_streak(streak, last, key)
            last = key
            seen.append(streak)
        self.assertEqual(seen, [1, 1, 2, 3, 3, 1, 2])

    def test_longest_and_active_day(self):
        self.assertEqual(longest_streak(10, 4), 10)
        self.assertEqual(longest_streak(None, 4), 4)
        self.assertTrue(is_new_active_day("2024-03-12", "2024-03-13"))
        self.assertFalse(is_new_active_day("2024-03-13", "2024-03-13"))


class PointsRulesTestCase(SimpleTestCase):
    def test_round_half_up(self):
        self.assertEqual(points.round_half_up(2.5), 3)
        self.assertEqual(points.round_half_up(3.75), 4)
        self.assertEqual(points.round_half_up(12.5), 13)
        self.assertEqual(points.round_half_up(1.49), 1)

    def test_streak_multiplier_tiers(self):
        self.assertEqual(points.streak_multiplier(0), 1.0)
        self.assertEqual(points.streak_multiplier(6), 1.0)
        self.assertEqual(points.streak_multiplier(7), 1.25)
        self.assertEqual(points.streak_multiplier(14), 1.5)
        self.assertEqual(points.streak_multiplier(30), 2.0)
        self.assertEqual(points.streak_multiplier(365), 2.0)

    def test_mission_points(self):
        # 10 * 1.0 + round(2.5 * 1.5)
        self.assertEqual(points.points(10, 2.5, "medium", 5), 14)
        # round(10 * 1.25) + round(2.5 * 1.5)
        self.assertEqual(points.points(10, 2.5, "medium", 7), 17)
        self.assertEqual(points.points(20, 3.0, "hard", 30), 46)
        self.assertEqual(points.points(10, 1.0, "unknown", 0), 11)

    def test_points_monotonic_in_co2_and_difficulty(self):
        tiers = ["easy", "medium", "hard"]
        for streak in (0, 7, 14, 30):
            for difficulty in tiers:
                values = [points.points(10, co2 / 2, difficulty, streak) for co2 in range(0, 40)]
                self.assertEqual(values, sorted(values))
            for co2 in (0, 0.3, 2.5, 17.0):
                values = [points.points(10, co2, d, streak) for d in tiers]
                self.assertEqual(values, sorted(values))

    def test_streak_bonus_crossing(self):
        self.assertTrue(points.crossed_streak_bonus(6, 7))
        self.assertFalse(points.crossed_streak_bonus(7, 8))
        self.assertFalse(points.crossed_streak_bonus(7, 7))
        self.assertFalse(points.crossed_streak_bonus(0, 1))

    def test_flat_bonuses(self):
        self.assertEqual(points.streak_bonus_points(), 50)
        self.assertEqual(points.daily_tier_bonus_points(), 25)

    def test_compliance_points(self):
        self.assertEqual(points.compliance_points(True, 0), 150)
        self.assertEqual(points.compliance_points(True, 1), 150)
        self.assertEqual(points.compliance_points(True, 2), 200)
        self.assertEqual(points.compliance_points(False, 2), 50)

    def test_report_points(self):
        self.assertEqual(points.report_points("mild"), 20)
        self.assertEqual(points.report_points("heavy"), 35)
        self.assertEqual(points.report_points("severe"), 50)


class BadgeEvaluatorTestCase(SimpleTestCase):
    def test_threshold_crossing_awards_once(self):
        before = newly_earned(_snapshot(total_co2_saved_kg=9.5, missions_count=1), {"first-step"})
        self.assertNotIn("bronze-10kg", before)

        crossed = newly_earned(_snapshot(total_co2_saved_kg=10.2, missions_count=1), {"first-step"})
        self.assertEqual(crossed, {"bronze-10kg"})

        again = newly_earned(_snapshot(total_co2_saved_kg=12.0, missions_count=1), {"first-step", "bronze-10kg"})
        self.assertEqual(again, set())

    def test_second_evaluation_is_empty(self):
        snapshot = _snapshot(total_co2_saved_kg=55, missions_count=12, current_streak=30, pollution_report_count=10)
        first = newly_earned(snapshot, set())
        self.assertTrue(first)
        self.assertEqual(newly_earned(snapshot, first), set())

    def test_all_thresholds_at_once(self):
        earned = newly_earned(
            _snapshot(total_co2_saved_kg=120, missions_count=3, current_streak=7, has_community=True),
            set(),
        )
        self.assertEqual(
            earned,
            {"first-step", "bronze-10kg", "silver-50kg", "gold-100kg", "streak-7", "community-builder"},
        )

    def test_milestone_badges_never_predicate_earned(self):
        milestone_only = {b.id for b in BADGE_CATALOG if b.predicate is None}
        earned = newly_earned(
            _snapshot(
                total_co2_saved_kg=10_000,
                missions_count=1000,
                current_streak=365,
                has_community=True,
                compliance_on_time_count=100,
                pollution_report_count=500,
            ),
            set(),
        )
        self.assertTrue(milestone_only)
        self.assertFalse(earned & milestone_only)

    def test_badge_ids_unique(self):
        ids = [b.id for b in BADGE_CATALOG]
        self.assertEqual(len(ids), len(set(ids)))


class DatetimeUtilsTestCase(SimpleTestCase):
    def test_keys(self):
        current = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(date_key(current), "2024-03-13")
        self.assertEqual(week_key(current), "2024-W11")
        self.assertEqual(month_key(current), "2024-03")
        # ISO week belongs to the previous year
        self.assertEqual(week_key(datetime(2021, 1, 1, tzinfo=dt_timezone.utc)), "2020-W53")

    def test_non_utc_input_uses_utc_day(self):
        ist = dt_timezone(timedelta(hours=5, minutes=30))
        self.assertEqual(date_key(datetime(2024, 3, 14, 2, 0, tzinfo=ist)), "2024-03-13")

    def test_bounds(self):
        current = datetime(2024, 2, 14, 12, 0, tzinfo=dt_timezone.utc)
        start, end = week_bounds(current)
        self.assertEqual(start, datetime(2024, 2, 12, tzinfo=dt_timezone.utc))
        self.assertEqual(end.date(), date(2024, 2, 18))

        start, end = month_bounds(current)
        self.assertEqual(start.date(), date(2024, 2, 1))
        self.assertEqual(end.date(), date(2024, 2, 29))

    def test_seconds_until_next_day(self):
        current = datetime(2024, 3, 13, 23, 59, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(seconds_until_next_day(current), 30)

    def test_add_months_clamps(self):
        self.assertEqual(add_months(date(2024, 1, 31), 1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2024, 11, 15), 3), date(2025, 2, 15))


class GoalHelpersTestCase(SimpleTestCase):
    def test_difficulty_tiers(self):
        self.assertEqual(difficulty_for_completed(0), "easy")
        self.assertEqual(difficulty_for_completed(3), "easy")
        self.assertEqual(difficulty_for_completed(4), "medium")
        self.assertEqual(difficulty_for_completed(11), "medium")
        self.assertEqual(difficulty_for_completed(12), "hard")

    def test_milestone_percent(self):
        self.assertEqual(percent_complete(10, 20), 50)
        self.assertEqual(percent_complete(1, 3), 33)
        self.assertEqual(percent_complete(55, 50), 100)

    def test_days_remaining_rounds_up(self):
        current = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(days_remaining(current + timedelta(days=2, hours=1), current), 3)
        self.assertEqual(days_remaining(current - timedelta(hours=1), current), 0)

    def test_challenge_percent(self):
        self.assertEqual(progress_percent(1010, 1000), 100)
        self.assertEqual(progress_percent(333, 1000), 33)
        self.assertEqual(progress_percent(10, 0), 0)

    def test_time_remaining(self):
        current = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(time_remaining(current + timedelta(days=1, hours=5, minutes=30), current), (1, 5))
        self.assertEqual(time_remaining(current - timedelta(days=1), current), (0, 0))

    def test_state_transitions(self):
        self.assertTrue(can_transition("active", "completed")[0])
        self.assertTrue(can_transition("active", "failed")[0])
        self.assertFalse(can_transition("completed", "failed")[0])
        self.assertFalse(can_transition("failed", "active")[0])
        self.assertFalse(can_transition("active", "archived")[0])
        self.assertTrue(is_terminal_status("completed"))
        self.assertFalse(is_terminal_status("active"))
