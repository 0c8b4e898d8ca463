from django.contrib import admin

from .models import ComplianceRecord, PollutionReport, Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("nickname", "vehicle_number", "user", "vehicle_type", "fuel_type", "is_active")
    list_filter = ("vehicle_type", "fuel_type", "is_active")
    search_fields = ("vehicle_number", "nickname", "user__username")


@admin.register(ComplianceRecord)
class ComplianceRecordAdmin(admin.ModelAdmin):
    list_display = ("vehicle", "user", "test_date", "expiry_date", "is_on_time", "points_awarded")
    list_filter = ("is_on_time", "result")
    search_fields = ("vehicle__vehicle_number", "certificate_number")


@admin.register(PollutionReport)
class PollutionReportAdmin(admin.ModelAdmin):
    list_display = ("reporter", "pollution_level", "pollution_type", "city", "status", "reported_at")
    list_filter = ("pollution_level", "status", "city")
    search_fields = ("vehicle_number", "city")
