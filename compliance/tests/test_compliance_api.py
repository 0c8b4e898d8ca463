from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from compliance.models import ComplianceRecord, PollutionReport, Vehicle
from compliance import services as compliance_services
from compliance.services import log_vehicle_compliance, send_expiry_reminders
from gamification.exceptions import NotEligible
from gamification.models import UserProgress
from notifications.models import Notification


User = get_user_model()

FIXED_NOW = datetime(2024, 3, 13, 10, 0, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


REPORT_PAYLOAD = {
    "vehicle_number": "ka 01 x 9999",
    "vehicle_type": "bus",
    "pollution_level": "heavy",
    "pollution_type": "black_smoke",
    "latitude": 12.97,
    "longitude": 77.59,
    "city": " Bengaluru ",
    "state": "Karnataka",
}


class ComplianceServiceTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="rider", password="pass1234")
        self.vehicle = Vehicle.objects.create(
            user=self.user,
            nickname="City car",
            vehicle_number="dl 3c ab 1234",
            vehicle_type=Vehicle.TYPE_FOUR_WHEELER,
            fuel_type=Vehicle.FUEL_DIESEL,
            year_of_manufacture=2015,
        )

    def test_vehicle_number_normalized(self):
        self.assertEqual(self.vehicle.vehicle_number, "DL3CAB1234")

    def test_first_and_late_certificates(self):
        first = log_vehicle_compliance(self.user, self.vehicle.id, date(2023, 10, 1), clock=fixed_clock)
        self.assertTrue(first["is_on_time"])
        self.assertEqual(first["expiry_date"], date(2024, 1, 1))
        self.assertEqual(first["points_awarded"], 150)
        self.assertEqual(first["co2_impact_kg"], 65)

        late = log_vehicle_compliance(self.user, self.vehicle.id, date(2024, 3, 1), clock=fixed_clock)
        self.assertFalse(late["is_on_time"])
        self.assertEqual(late["points_awarded"], 50)

        progress = UserProgress.objects.get(user=self.user)
        self.assertEqual(progress.compliance_on_time_count, 1)
        self.assertAlmostEqual(progress.total_co2_saved_kg, 130)

    def test_previous_certificate_read_under_vehicle_lock(self):
        log_vehicle_compliance(self.user, self.vehicle.id, date(2023, 10, 1), clock=fixed_clock)

        calls = mock.Mock()
        with mock.patch.object(compliance_services, "get_user_vehicle", wraps=compliance_services.get_user_vehicle) as lock_vehicle, \
                mock.patch.object(compliance_services, "latest_record", wraps=compliance_services.latest_record) as read_previous:
            calls.attach_mock(lock_vehicle, "lock_vehicle")
            calls.attach_mock(read_previous, "read_previous")
            result = log_vehicle_compliance(self.user, self.vehicle.id, date(2023, 12, 20), clock=fixed_clock)

        self.assertEqual(
            [name for name, _, _ in calls.mock_calls],
            ["lock_vehicle", "read_previous"],
        )
        lock_vehicle.assert_called_once_with(self.user, self.vehicle.id, lock=True)
        self.assertTrue(result["is_on_time"])

    def test_electric_vehicle_not_eligible(self):
        ev = Vehicle.objects.create(
            user=self.user, nickname="EV", vehicle_number="MH01EV0001",
            vehicle_type=Vehicle.TYPE_FOUR_WHEELER, fuel_type=Vehicle.FUEL_ELECTRIC,
        )

        with self.assertRaises(NotEligible):
            log_vehicle_compliance(self.user, ev.id, date(2024, 3, 1), clock=fixed_clock)
        self.assertFalse(ComplianceRecord.objects.filter(vehicle=ev).exists())

    def test_other_users_vehicle(self):
        stranger = User.objects.create_user(username="stranger", password="pass1234")
        with self.assertRaises(Vehicle.DoesNotExist):
            log_vehicle_compliance(stranger, self.vehicle.id, date(2024, 3, 1), clock=fixed_clock)


class ExpiryReminderTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="remind", password="pass1234")
        self.vehicle = Vehicle.objects.create(
            user=self.user, nickname="Bike", vehicle_number="GJ01AA0001",
            vehicle_type=Vehicle.TYPE_TWO_WHEELER, fuel_type=Vehicle.FUEL_PETROL,
        )

    def _record(self, test_date, expiry_date):
        return ComplianceRecord.objects.create(
            vehicle=self.vehicle, user=self.user, test_date=test_date, expiry_date=expiry_date,
        )

    @mock.patch("notifications.services.requests.post")
    def test_threshold_sent_once(self, mock_post):
        record = self._record(date(2023, 9, 20), FIXED_NOW.date() + timedelta(days=7))

        self.assertEqual(send_expiry_reminders(clock=fixed_clock), 1)
        self.assertEqual(send_expiry_reminders(clock=fixed_clock), 0)

        record.refresh_from_db()
        self.assertEqual(record.reminder_sent_days, [7])
        notif = Notification.objects.get(user=self.user)
        self.assertEqual(notif.type, Notification.TYPE_COMPLIANCE_REMINDER)
        self.assertIn("7 days", notif.body)
        mock_post.assert_not_called()

    def test_superseded_certificate_skipped(self):
        self._record(date(2023, 9, 20), FIXED_NOW.date() + timedelta(days=7))
        self._record(date(2024, 3, 10), date(2024, 9, 10))

        self.assertEqual(send_expiry_reminders(clock=fixed_clock), 0)


class ComplianceAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="api_rider", password="pass1234")
        self.client.force_authenticate(user=self.user)

    def _create_vehicle(self, **overrides):
        payload = {
            "nickname": "Scooty",
            "vehicle_number": "mh 12 ab 1234",
            "vehicle_type": "two_wheeler",
            "fuel_type": "petrol",
        }
        payload.update(overrides)
        return self.client.post(reverse("vehicles"), payload, format="json")

    def test_register_and_list_vehicles(self):
        res = self._create_vehicle()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["vehicle_number"], "MH12AB1234")
        self.assertEqual(res.data["compliance_status"]["status"], "no_record")

        res = self.client.get(reverse("vehicles"))
        self.assertEqual(len(res.data), 1)

    def test_invalid_year(self):
        res = self._create_vehicle(year_of_manufacture=1900)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_log_certificate(self):
        vehicle_id = self._create_vehicle().data["id"]
        url = reverse("vehicle-compliance-log", kwargs={"vehicle_id": vehicle_id})

        res = self.client.post(url, {"test_date": timezone.now().date().isoformat(), "center_name": "PUC Andheri"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["points_awarded"], 150)

        res = self.client.get(url)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["center_name"], "PUC Andheri")

    def test_future_test_date_rejected(self):
        vehicle_id = self._create_vehicle().data["id"]
        url = reverse("vehicle-compliance-log", kwargs={"vehicle_id": vehicle_id})
        tomorrow = (timezone.now() + timedelta(days=1)).date().isoformat()

        res = self.client.post(url, {"test_date": tomorrow}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_log_unknown_vehicle(self):
        url = reverse("vehicle-compliance-log", kwargs={"vehicle_id": 9999})
        res = self.client.post(url, {"test_date": "2024-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_log_electric_vehicle(self):
        vehicle_id = self._create_vehicle(fuel_type="electric").data["id"]
        url = reverse("vehicle-compliance-log", kwargs={"vehicle_id": vehicle_id})

        res = self.client.post(url, {"test_date": "2024-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(res.data["code"], "NOT_ELIGIBLE")

    def test_submit_report(self):
        res = self.client.post(reverse("pollution-reports"), REPORT_PAYLOAD, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["points_awarded"], 35)
        report = PollutionReport.objects.get(pk=res.data["report_id"])
        self.assertEqual(report.vehicle_number, "KA01X9999")
        self.assertEqual(report.city, "Bengaluru")
        self.assertEqual(report.estimated_impact_kg, 450)

        res = self.client.get(reverse("pollution-reports"))
        self.assertEqual(len(res.data), 1)

    def test_report_bad_coordinates(self):
        payload = dict(REPORT_PAYLOAD, latitude=123)
        res = self.client.post(reverse("pollution-reports"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(ECOACT={"DAILY_REPORT_LIMIT": 1})
    def test_report_rate_limited(self):
        self.client.post(reverse("pollution-reports"), REPORT_PAYLOAD, format="json")
        res = self.client.post(reverse("pollution-reports"), REPORT_PAYLOAD, format="json")

        self.assertEqual(res.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(res.data["code"], "RATE_LIMITED")
        self.assertGreater(res.data["retry_after"], 0)
        self.assertEqual(res["Retry-After"], str(res.data["retry_after"]))
