# compliance/models.py
from django.conf import settings
from django.db import models


def normalize_vehicle_number(value):
    """'mh 12 ab 1234' -> 'MH12AB1234'"""
    return "".join(str(value or "").split()).upper()


class Vehicle(models.Model):
    TYPE_TWO_WHEELER = "two_wheeler"
    TYPE_THREE_WHEELER = "three_wheeler"
    TYPE_FOUR_WHEELER = "four_wheeler"
    TYPE_COMMERCIAL = "commercial"

    TYPE_CHOICES = [
        (TYPE_TWO_WHEELER, "Two wheeler"),
        (TYPE_THREE_WHEELER, "Three wheeler"),
        (TYPE_FOUR_WHEELER, "Four wheeler"),
        (TYPE_COMMERCIAL, "Commercial"),
    ]

    FUEL_PETROL = "petrol"
    FUEL_DIESEL = "diesel"
    FUEL_CNG = "cng"
    FUEL_ELECTRIC = "electric"

    FUEL_CHOICES = [
        (FUEL_PETROL, "Petrol"),
        (FUEL_DIESEL, "Diesel"),
        (FUEL_CNG, "CNG"),
        (FUEL_ELECTRIC, "Electric"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vehicles",
    )
    nickname = models.CharField(max_length=100)
    vehicle_number = models.CharField(max_length=20, db_index=True)
    vehicle_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    fuel_type = models.CharField(max_length=16, choices=FUEL_CHOICES)
    brand = models.CharField(max_length=100, blank=True, default="")
    model_name = models.CharField(max_length=100, blank=True, default="")
    year_of_manufacture = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_active"], name="vehicle_user_active_idx"),
        ]

    def save(self, *args, **kwargs):
        self.vehicle_number = normalize_vehicle_number(self.vehicle_number)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.nickname} ({self.vehicle_number})"

    @property
    def is_exempt(self):
        return self.fuel_type == self.FUEL_ELECTRIC


class ComplianceRecord(models.Model):
    """
    A logged emission (PUC) certificate for a vehicle.
    """
    RESULT_PASS = "pass"
    RESULT_FAIL = "fail"

    RESULT_CHOICES = [
        (RESULT_PASS, "Pass"),
        (RESULT_FAIL, "Fail"),
    ]

    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.CASCADE,
        related_name="compliance_records",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="compliance_records",
    )
    test_date = models.DateField()
    expiry_date = models.DateField()

    center_name = models.CharField(max_length=255, blank=True, default="")
    center_city = models.CharField(max_length=100, blank=True, default="")
    certificate_number = models.CharField(max_length=64, blank=True, default="")
    result = models.CharField(max_length=8, choices=RESULT_CHOICES, default=RESULT_PASS)

    points_awarded = models.PositiveIntegerField(default=0)
    co2_impact_kg = models.FloatField(default=0)
    is_on_time = models.BooleanField(default=True)

    # Days-before-expiry thresholds a reminder has already gone out for
    reminder_sent_days = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-test_date", "-created_at"]
        indexes = [
            models.Index(fields=["vehicle", "-test_date"], name="compliance_vehicle_idx"),
            models.Index(fields=["expiry_date"], name="compliance_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.vehicle} tested {self.test_date} (expires {self.expiry_date})"


class PollutionReport(models.Model):
    LEVEL_MILD = "mild"
    LEVEL_HEAVY = "heavy"
    LEVEL_SEVERE = "severe"

    LEVEL_CHOICES = [
        (LEVEL_MILD, "Mild"),
        (LEVEL_HEAVY, "Heavy"),
        (LEVEL_SEVERE, "Severe"),
    ]

    TYPE_CHOICES = [
        ("black_smoke", "Black smoke"),
        ("white_smoke", "White smoke"),
        ("strong_odor", "Strong odor"),
        ("visible_exhaust", "Visible exhaust"),
        ("multiple", "Multiple"),
    ]

    VEHICLE_TYPE_CHOICES = [
        ("two_wheeler", "Two wheeler"),
        ("three_wheeler", "Three wheeler"),
        ("four_wheeler", "Four wheeler"),
        ("commercial_truck", "Commercial truck"),
        ("bus", "Bus"),
        ("unknown", "Unknown"),
    ]

    STATUS_PENDING = "pending"
    STATUS_VERIFIED = "verified"
    STATUS_DISMISSED = "dismissed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_VERIFIED, "Verified"),
        (STATUS_DISMISSED, "Dismissed"),
    ]

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="pollution_reports",
    )
    vehicle_number = models.CharField(max_length=20, blank=True, default="")
    vehicle_type = models.CharField(max_length=20, choices=VEHICLE_TYPE_CHOICES, default="unknown")
    vehicle_color = models.CharField(max_length=32, blank=True, default="")
    pollution_level = models.CharField(max_length=8, choices=LEVEL_CHOICES)
    pollution_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.TextField(blank=True, default="")

    latitude = models.FloatField()
    longitude = models.FloatField()
    location_name = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    points_awarded = models.PositiveIntegerField(default=0)
    # Estimated emissions of the reported vehicle; not credited to the reporter
    estimated_impact_kg = models.FloatField(default=0)

    date_key = models.CharField(max_length=10)
    reported_at = models.DateTimeField()

    class Meta:
        ordering = ["-reported_at"]
        indexes = [
            models.Index(fields=["reporter", "date_key"], name="report_daily_limit_idx"),
            models.Index(fields=["city", "-reported_at"], name="report_city_idx"),
        ]

    def save(self, *args, **kwargs):
        self.vehicle_number = normalize_vehicle_number(self.vehicle_number)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.pollution_level} report by {self.reporter} in {self.city}"
