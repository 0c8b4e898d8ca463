from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.models import Community, CommunityMembership
from gamification.engine import RewardsEngine
from gamification.models import UserProgress
from missions.models import Mission
from notifications.models import Notification
from ux.services.dashboard import get_dashboard_summary


User = get_user_model()

FIXED_NOW = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


class DashboardSummaryTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="dash", password="pass1234")
        self.community = Community.objects.create(name="Kochi Green", slug="kochi-green")
        CommunityMembership.objects.create(community=self.community, user=self.user, is_default=True)
        self.mission = Mission.objects.create(
            title="Metro", category="transport", difficulty="easy", co2_saved_kg=2.0, base_points=20
        )

    def test_summary_after_mission(self):
        RewardsEngine(clock=fixed_clock).complete_mission(self.user, self.mission.id)
        Notification.objects.create(user=self.user, title="Hello")

        stats = get_dashboard_summary(self.user, clock=fixed_clock)

        self.assertEqual(stats["total_points"], 22)
        self.assertEqual(stats["total_co2_saved_kg"], 2.0)
        self.assertEqual(stats["current_streak"], 1)
        self.assertEqual(stats["missions_today"], 1)
        self.assertEqual(stats["missions_completed"], 1)
        self.assertEqual(stats["badges_earned"], 2)
        self.assertEqual(stats["active_milestones"], 5)
        self.assertEqual(stats["closest_milestone"]["type"], "weekly_missions")
        self.assertEqual(stats["community"]["id"], self.community.id)
        self.assertEqual(stats["community"]["challenge"]["current_co2_kg"], 2.0)
        self.assertEqual(stats["unread_notifications"], 1)

    def test_lapsed_streak_shown_as_zero(self):
        UserProgress.objects.create(user=self.user, current_streak=9, longest_streak=9, last_active_date_key="2024-03-01")

        stats = get_dashboard_summary(self.user, clock=fixed_clock)

        self.assertEqual(stats["current_streak"], 0)
        self.assertEqual(stats["longest_streak"], 9)

    def test_endpoint(self):
        client = APIClient()
        client.force_authenticate(user=self.user)

        res = client.get(reverse("ux-dashboard-summary"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["meta"]["success"])
        self.assertIn("stats", res.data["data"])
