# compliance/rules.py
"""
Emission-certificate rules: validity, punctuality and status.
"""
from datetime import date

from gamification.datetime_utils import add_months

from .models import Vehicle

VALIDITY_MONTHS = {
    Vehicle.FUEL_PETROL: 6,
    Vehicle.FUEL_CNG: 6,
    Vehicle.FUEL_DIESEL: 3,
    Vehicle.FUEL_ELECTRIC: 0,
}
DEFAULT_VALIDITY_MONTHS = 6
# New vehicles get a 12 month first certificate
NEW_VEHICLE_VALIDITY_MONTHS = 12

CO2_IMPACT_KG = {
    Vehicle.TYPE_TWO_WHEELER: 28,
    Vehicle.TYPE_THREE_WHEELER: 42,
    Vehicle.TYPE_FOUR_WHEELER: 65,
    Vehicle.TYPE_COMMERCIAL: 120,
}
DEFAULT_CO2_IMPACT_KG = 40

POLLUTION_IMPACT_KG = {
    "mild": 120,
    "heavy": 450,
    "severe": 900,
}

REMINDER_THRESHOLDS = (30, 15, 7, 1)

STATUS_VALID = "valid"
STATUS_EXPIRING_SOON = "expiring_soon"
STATUS_EXPIRED = "expired"
STATUS_NO_RECORD = "no_record"
STATUS_EXEMPT = "exempt"


def co2_impact_for(vehicle_type):
    return CO2_IMPACT_KG.get(vehicle_type, DEFAULT_CO2_IMPACT_KG)


def is_new_vehicle(year_of_manufacture, today: date) -> bool:
    if not year_of_manufacture:
        return False
    return today.year - year_of_manufacture <= 1


def validity_months(fuel_type, is_first_certificate=False, year_of_manufacture=None, today=None) -> int:
    if is_first_certificate and is_new_vehicle(year_of_manufacture, today or date.today()):
        return NEW_VEHICLE_VALIDITY_MONTHS
    return VALIDITY_MONTHS.get(fuel_type, DEFAULT_VALIDITY_MONTHS)


def compute_expiry_date(test_date: date, months: int) -> date:
    return add_months(test_date, months)


def is_on_time(previous_record, test_date: date) -> bool:
    """First certificate, or renewed no later than the previous expiry."""
    return previous_record is None or test_date <= previous_record.expiry_date


def compliance_status(latest_record, fuel_type, today: date):
    if fuel_type == Vehicle.FUEL_ELECTRIC:
        return {"status": STATUS_EXEMPT, "days_remaining": 0, "expiry_date": None, "urgency": "safe"}

    if latest_record is None:
        return {"status": STATUS_NO_RECORD, "days_remaining": 0, "expiry_date": None, "urgency": "critical"}

    expiry = latest_record.expiry_date
    days_remaining = (expiry - today).days

    if days_remaining < 0:
        status, urgency = STATUS_EXPIRED, "overdue"
    elif days_remaining <= 15:
        status, urgency = STATUS_EXPIRING_SOON, "critical"
    elif days_remaining <= 30:
        status, urgency = STATUS_EXPIRING_SOON, "warning"
    else:
        status, urgency = STATUS_VALID, "safe"

    return {"status": status, "days_remaining": days_remaining, "expiry_date": expiry, "urgency": urgency}


def pollution_impact_for(level):
    return POLLUTION_IMPACT_KG.get(level, 0)
