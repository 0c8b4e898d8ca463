# compliance/services.py
import logging
from datetime import timedelta

from django.db import DatabaseError, transaction

from gamification.datetime_utils import now
from gamification.engine import RewardsEngine
from gamification.exceptions import NotEligible, TransientStoreFailure
from notifications.models import Notification
from notifications.services import send_push_notification

from . import rules
from .models import ComplianceRecord, Vehicle

logger = logging.getLogger("ecoact.compliance")


def get_user_vehicle(user, vehicle_id, lock=False):
    """Active vehicle owned by user; raises Vehicle.DoesNotExist otherwise."""
    qs = Vehicle.objects.filter(is_active=True)
    if lock:
        qs = qs.select_for_update()
    return qs.get(pk=vehicle_id, user=user)


def latest_record(vehicle):
    return vehicle.compliance_records.order_by("-test_date", "-created_at").first()


def log_vehicle_compliance(user, vehicle_id, test_date, engine=None, clock=now, **details):
    """
    Log an emission certificate for one of the user's vehicles and reward it.

    The vehicle row stays locked until commit, so the previous certificate
    read here is still the latest one when the new record is written.
    """
    engine = engine or RewardsEngine(clock=clock)
    try:
        with transaction.atomic():
            vehicle = get_user_vehicle(user, vehicle_id, lock=True)
            if vehicle.is_exempt:
                raise NotEligible("Electric vehicles are exempt from emission certificates.")

            today = clock().date()
            previous = latest_record(vehicle)
            months = rules.validity_months(
                vehicle.fuel_type,
                is_first_certificate=previous is None,
                year_of_manufacture=vehicle.year_of_manufacture,
                today=today,
            )
            expiry_date = rules.compute_expiry_date(test_date, months)
            on_time = rules.is_on_time(previous, test_date)

            result = engine.log_compliance_event(
                user,
                vehicle.pk,
                rules.co2_impact_for(vehicle.vehicle_type),
                on_time,
                test_date=test_date,
                expiry_date=expiry_date,
                **details,
            )
    except DatabaseError as e:
        logger.error(f"Compliance log failed for vehicle {vehicle_id}: {e}")
        raise TransientStoreFailure() from e

    logger.info(f"Compliance logged: user={user.pk}, vehicle={vehicle.pk}, on_time={on_time}, expiry={expiry_date}")
    return result


def submit_pollution_report(user, data, engine=None, clock=now):
    """
    data: validated PollutionReportSerializer fields.
    """
    fields = dict(data)
    level = fields.pop("pollution_level")
    fields["vehicle_number"] = fields.get("vehicle_number", "")
    fields["city"] = fields.get("city", "").strip()
    fields["state"] = fields.get("state", "").strip()

    engine = engine or RewardsEngine(clock=clock)
    return engine.submit_pollution_report(
        user,
        level,
        estimated_impact_kg=rules.pollution_impact_for(level),
        **fields,
    )


def vehicle_status(vehicle, clock=now):
    return rules.compliance_status(latest_record(vehicle), vehicle.fuel_type, clock().date())


def send_expiry_reminders(clock=now):
    """
    Push a reminder when a certificate is 30, 15, 7 or 1 days from expiry.
    Each threshold is sent at most once per record. Returns how many went out.
    """
    today = clock().date()
    sent_count = 0

    for days in rules.REMINDER_THRESHOLDS:
        target = today + timedelta(days=days)
        records = (
            ComplianceRecord.objects
            .select_related("vehicle", "user")
            .filter(expiry_date=target, vehicle__is_active=True)
        )
        for record in records:
            if days in (record.reminder_sent_days or []):
                continue
            # Only the newest certificate of a vehicle matters
            if latest_record(record.vehicle).pk != record.pk:
                continue

            send_push_notification(
                record.user,
                "Emission certificate expiring",
                f"{record.vehicle.nickname}'s certificate expires in {days} day{'s' if days != 1 else ''}.",
                data={"screen": "vehicle", "vehicle_id": record.vehicle_id},
                notification_type=Notification.TYPE_COMPLIANCE_REMINDER,
            )
            record.reminder_sent_days = sorted(set(record.reminder_sent_days or []) | {days})
            record.save(update_fields=["reminder_sent_days"])
            sent_count += 1

    if sent_count:
        logger.info(f"Sent {sent_count} compliance expiry reminders")
    return sent_count
