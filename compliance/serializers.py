from django.utils import timezone
from rest_framework import serializers

from .models import ComplianceRecord, PollutionReport, Vehicle
from .services import vehicle_status


class VehicleSerializer(serializers.ModelSerializer):
    compliance_status = serializers.SerializerMethodField()

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "nickname",
            "vehicle_number",
            "vehicle_type",
            "fuel_type",
            "brand",
            "model_name",
            "year_of_manufacture",
            "compliance_status",
            "created_at",
        ]
        read_only_fields = ["id", "compliance_status", "created_at"]

    def get_compliance_status(self, obj):
        return vehicle_status(obj)

    def validate_year_of_manufacture(self, value):
        if value is not None and not (1950 <= value <= timezone.now().year + 1):
            raise serializers.ValidationError("Invalid year of manufacture.")
        return value


class ComplianceRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = ComplianceRecord
        fields = [
            "id",
            "vehicle",
            "test_date",
            "expiry_date",
            "center_name",
            "center_city",
            "certificate_number",
            "result",
            "points_awarded",
            "co2_impact_kg",
            "is_on_time",
            "created_at",
        ]
        read_only_fields = fields


class ComplianceLogSerializer(serializers.Serializer):
    test_date = serializers.DateField()
    center_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    center_city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    certificate_number = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    result = serializers.ChoiceField(choices=ComplianceRecord.RESULT_CHOICES, default=ComplianceRecord.RESULT_PASS)

    def validate_test_date(self, value):
        if value > timezone.now().date():
            raise serializers.ValidationError("Test date cannot be in the future.")
        return value


class PollutionReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = PollutionReport
        fields = [
            "id",
            "vehicle_number",
            "vehicle_type",
            "vehicle_color",
            "pollution_level",
            "pollution_type",
            "description",
            "latitude",
            "longitude",
            "location_name",
            "city",
            "state",
            "status",
            "points_awarded",
            "reported_at",
        ]
        read_only_fields = ["id", "status", "points_awarded", "reported_at"]

    def validate_latitude(self, value):
        if not -90 <= value <= 90:
            raise serializers.ValidationError("Latitude must be between -90 and 90.")
        return value

    def validate_longitude(self, value):
        if not -180 <= value <= 180:
            raise serializers.ValidationError("Longitude must be between -180 and 180.")
        return value
