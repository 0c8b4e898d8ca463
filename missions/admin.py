from django.contrib import admin

from .models import DailyMissionPool, DailySignal, FootprintLog, Mission, MissionCompletion


@admin.register(Mission)
class MissionAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "difficulty", "co2_saved_kg", "base_points", "is_active")
    list_filter = ("category", "difficulty", "is_active")
    search_fields = ("title",)


@admin.register(MissionCompletion)
class MissionCompletionAdmin(admin.ModelAdmin):
    list_display = ("user", "mission", "points_awarded", "co2_saved_awarded", "date_key")
    search_fields = ("user__username", "mission__title")


@admin.register(DailyMissionPool)
class DailyMissionPoolAdmin(admin.ModelAdmin):
    list_display = ("user", "date_key", "preferred_category", "mission_ids")
    search_fields = ("user__username", "date_key")


admin.site.register(DailySignal)
admin.site.register(FootprintLog)
