from datetime import datetime, timezone as dt_timezone
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from missions.models import DailyMissionPool, FootprintLog, Mission, MissionCompletion
from missions.services import get_daily_pool, is_daily_pool_completed, record_daily_signal


User = get_user_model()

FIXED_NOW = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


def create_catalog():
    return {
        "bike": Mission.objects.create(title="Bike", category="transport", difficulty="easy", co2_saved_kg=1.0, base_points=50),
        "veg": Mission.objects.create(title="Veg day", category="food", difficulty="easy", co2_saved_kg=2.5, base_points=90),
        "vegan": Mission.objects.create(title="Vegan day", category="food", difficulty="medium", co2_saved_kg=4.1, base_points=130),
        "metro": Mission.objects.create(title="Metro", category="transport", difficulty="medium", co2_saved_kg=2.1, base_points=80),
        "led": Mission.objects.create(title="LED", category="energy", difficulty="hard", co2_saved_kg=25.5, base_points=200),
    }


class DailyPoolServiceTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="pooler", password="pass1234")
        self.catalog = create_catalog()

    def test_pool_uses_footprint_category(self):
        FootprintLog.objects.create(user=self.user, total_co2_kg=5, breakdown={"food": 3.0, "transport": 1.0})

        pool, missions = get_daily_pool(self.user, clock=fixed_clock)

        self.assertEqual(pool.preferred_category, "food")
        self.assertEqual(pool.date_key, "2024-03-13")
        self.assertEqual(
            [m.id for m in missions],
            [self.catalog["veg"].id, self.catalog["vegan"].id, self.catalog["led"].id],
        )

    def test_signal_overrides_footprint(self):
        FootprintLog.objects.create(user=self.user, total_co2_kg=5, breakdown={"food": 3.0})
        record_daily_signal(self.user, car_km=30, clock=fixed_clock)

        pool, missions = get_daily_pool(self.user, clock=fixed_clock)

        self.assertEqual(pool.preferred_category, "transport")
        self.assertEqual(missions[0].id, self.catalog["bike"].id)

    def test_same_day_returns_cached_pool(self):
        first, _ = get_daily_pool(self.user, clock=fixed_clock)
        # A later signal does not reshuffle today's suggestions
        record_daily_signal(self.user, ac_hours=10, clock=fixed_clock)
        second, _ = get_daily_pool(self.user, clock=fixed_clock)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.mission_ids, second.mission_ids)
        self.assertEqual(DailyMissionPool.objects.filter(user=self.user).count(), 1)

    def test_pool_completion(self):
        pool, missions = get_daily_pool(self.user, clock=fixed_clock)
        self.assertFalse(is_daily_pool_completed(self.user, pool.date_key))

        for mission in missions:
            MissionCompletion.objects.create(
                user=self.user, mission=mission, date_key=pool.date_key, completed_at=FIXED_NOW
            )

        self.assertTrue(is_daily_pool_completed(self.user, pool.date_key))
        self.assertFalse(is_daily_pool_completed(self.user, "2024-03-14"))

    def test_completed_missions_never_suggested(self):
        for key in ("bike", "veg"):
            MissionCompletion.objects.create(
                user=self.user, mission=self.catalog[key], date_key="2024-03-12", completed_at=FIXED_NOW
            )

        pool, missions = get_daily_pool(self.user, clock=fixed_clock)

        # Both easy missions are done, so the easy tier is skipped
        self.assertEqual([m.id for m in missions], [self.catalog["metro"].id, self.catalog["led"].id])
        self.assertFalse(set(pool.mission_ids) & {self.catalog["bike"].id, self.catalog["veg"].id})


class MissionsAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="api_eco", password="pass1234")
        self.client.force_authenticate(user=self.user)
        self.catalog = create_catalog()

    def test_list_and_filter(self):
        res = self.client.get(reverse("missions-list"), {"category": "food"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual({m["title"] for m in res.data}, {"Veg day", "Vegan day"})
        self.assertTrue(all(m["is_completed"] is False for m in res.data))

    def test_daily(self):
        res = self.client.get(reverse("missions-daily"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["missions"]), 3)
        self.assertEqual(res.data["preferred_category"], "transport")
        self.assertFalse(res.data["all_completed"])

    def test_daily_signal_validation(self):
        res = self.client.post(reverse("missions-daily-signal"), {"car_km": -1}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post(reverse("missions-daily-signal"), {"car_km": 20, "food_type": "veg"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["car_km"], 20)

    def test_complete_then_conflict(self):
        url = reverse("mission-complete", kwargs={"mission_id": self.catalog["veg"].id})

        res = self.client.post(url)
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        # 90 + round(2.5 * 1.0)
        self.assertEqual(res.data["points_awarded"], 93)
        self.assertEqual(res.data["current_streak"], 1)

        res = self.client.post(url)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "ALREADY_COMPLETED")
        self.assertFalse(res.data["success"])

        res = self.client.get(reverse("missions-completed"))
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["mission"]["title"], "Veg day")

    def test_complete_unknown_mission(self):
        res = self.client.post(reverse("mission-complete", kwargs={"mission_id": 424242}))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class SeedMissionsCommandTestCase(TestCase):
    def test_idempotent(self):
        call_command("seed_missions", stdout=StringIO())
        count = Mission.objects.count()
        call_command("seed_missions", stdout=StringIO())

        self.assertEqual(count, 20)
        self.assertEqual(Mission.objects.count(), count)
