from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.constants import ACTIVITY_CHALLENGE_COMPLETED, ACTIVITY_CHALLENGE_STARTED
from core.models import Community, CommunityActivity
from gamification.challenges import ChallengeContributionAggregator
from gamification.models import ChallengeParticipant, CommunityChallenge


User = get_user_model()

FIXED_NOW = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)


class ChallengeAggregatorTestCase(TestCase):
    def setUp(self):
        self.community = Community.objects.create(name="Green Campus", slug="green-campus")
        self.user = User.objects.create_user(username="chal", password="pass1234")
        self.other = User.objects.create_user(username="chal2", password="pass1234")
        self.aggregator = ChallengeContributionAggregator(clock=lambda: FIXED_NOW)

    def _challenge(self, goal=1000, current=0, start=None, end=None, status=CommunityChallenge.STATUS_ACTIVE):
        return CommunityChallenge.objects.create(
            community=self.community,
            title="Test challenge",
            goal_co2_kg=goal,
            current_co2_kg=current,
            start_at=start or FIXED_NOW - timedelta(days=1),
            end_at=end or FIXED_NOW + timedelta(days=6),
            status=status,
        )

    def test_ensure_active_creates_from_rotation_once(self):
        with self.captureOnCommitCallbacks(execute=True):
            challenge, created = self.aggregator.ensure_active(self.community)
        again, created_again = self.aggregator.ensure_active(self.community)

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(challenge.pk, again.pk)
        self.assertEqual(challenge.title, "Save 500 kg CO2 This Week")
        self.assertEqual(challenge.goal_co2_kg, 500)
        self.assertEqual(challenge.end_at, FIXED_NOW + timedelta(days=7))
        self.assertTrue(
            CommunityActivity.objects.filter(community=self.community, verb=ACTIVITY_CHALLENGE_STARTED).exists()
        )

    def test_expired_challenge_is_failed_and_replaced(self):
        stale = self._challenge(start=FIXED_NOW - timedelta(days=8), end=FIXED_NOW - timedelta(days=1))

        challenge, created = self.aggregator.ensure_active(self.community)

        stale.refresh_from_db()
        self.assertEqual(stale.status, CommunityChallenge.STATUS_FAILED)
        self.assertTrue(created)
        # Second template in the rotation
        self.assertEqual(challenge.goal_co2_kg, 1000)
        self.assertEqual(challenge.end_at, FIXED_NOW + timedelta(days=30))

    def test_window_end_is_inclusive(self):
        ending = self._challenge(end=FIXED_NOW)

        challenge, created = self.aggregator.ensure_active(self.community)
        self.assertFalse(created)
        self.assertEqual(challenge.pk, ending.pk)

        challenge, _ = self.aggregator.apply_contribution(self.community, 5, user=self.user)
        self.assertEqual(challenge.pk, ending.pk)
        self.assertEqual(challenge.current_co2_kg, 5)
        self.assertEqual(self.aggregator.sweep_expired(), 0)

    def test_contribution_completes_challenge_once(self):
        challenge = self._challenge(goal=1000, current=950)

        with self.captureOnCommitCallbacks(execute=True):
            result, completed = self.aggregator.apply_contribution(self.community, 60, user=self.user)

        self.assertTrue(completed)
        self.assertEqual(result.pk, challenge.pk)
        challenge.refresh_from_db()
        self.assertEqual(challenge.current_co2_kg, 1010)
        self.assertEqual(challenge.status, CommunityChallenge.STATUS_COMPLETED)
        self.assertEqual(challenge.completed_at, FIXED_NOW)
        self.assertEqual(self.aggregator.challenge_view(challenge)["progress_percent"], 100)
        self.assertEqual(
            CommunityActivity.objects.filter(community=self.community, verb=ACTIVITY_CHALLENGE_COMPLETED).count(),
            1,
        )

        # Nothing running any more
        result, completed = self.aggregator.apply_contribution(self.community, 10, user=self.user)
        self.assertIsNone(result)
        self.assertFalse(completed)
        challenge.refresh_from_db()
        self.assertEqual(challenge.current_co2_kg, 1010)

    def test_participants_counted_once(self):
        challenge = self._challenge()

        self.aggregator.apply_contribution(self.community, 5, user=self.user)
        self.aggregator.apply_contribution(self.community, 7, user=self.user)
        self.aggregator.apply_contribution(self.community, 3, user=self.other)

        challenge.refresh_from_db()
        self.assertEqual(challenge.participant_count, 2)
        self.assertEqual(challenge.current_co2_kg, 15)
        self.assertEqual(ChallengeParticipant.objects.get(challenge=challenge, user=self.user).co2_contributed_kg, 12)

    def test_zero_contribution_is_ignored(self):
        challenge = self._challenge()

        _, completed = self.aggregator.apply_contribution(self.community, 0, user=self.user)

        self.assertFalse(completed)
        self.assertFalse(ChallengeParticipant.objects.filter(challenge=challenge).exists())

    def test_create_challenge_rejected_while_one_runs(self):
        self._challenge()
        self.assertIsNone(self.aggregator.create_challenge(self.community, "Another", 300, 7))

    def test_create_custom_challenge(self):
        challenge = self.aggregator.create_challenge(
            self.community, "Car-free fortnight", 300, 14, created_by=self.user
        )

        self.assertEqual(challenge.created_by, self.user)
        self.assertEqual(challenge.end_at, FIXED_NOW + timedelta(days=14))
        view = self.aggregator.challenge_view(challenge)
        self.assertEqual(view["days_remaining"], 14)
        self.assertEqual(view["hours_remaining"], 0)
        self.assertEqual(view["progress_percent"], 0)

    def test_sweep_expired(self):
        expired = self._challenge(start=FIXED_NOW - timedelta(days=10), end=FIXED_NOW - timedelta(hours=1))

        self.assertEqual(self.aggregator.sweep_expired(), 1)
        expired.refresh_from_db()
        self.assertEqual(expired.status, CommunityChallenge.STATUS_FAILED)

    def test_history_lists_newest_first(self):
        self._challenge(
            start=FIXED_NOW - timedelta(days=20), end=FIXED_NOW - timedelta(days=13),
            status=CommunityChallenge.STATUS_COMPLETED,
        )
        self._challenge()

        history = self.aggregator.get_history(self.community)
        self.assertEqual([c["status"] for c in history], ["active", "completed"])
