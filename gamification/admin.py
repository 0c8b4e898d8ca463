from django.contrib import admin

from .models import (
    ChallengeParticipant,
    CommunityChallenge,
    PointsLog,
    RecurringMilestone,
    UserBadge,
    UserProgress,
)


@admin.register(UserProgress)
class UserProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "total_points", "total_co2_saved_kg", "current_streak", "longest_streak", "last_active_date_key")
    search_fields = ("user__username", "user__email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(UserBadge)
class UserBadgeAdmin(admin.ModelAdmin):
    list_display = ("user", "badge_id", "earned_at")
    list_filter = ("badge_id",)
    search_fields = ("user__username",)


@admin.register(PointsLog)
class PointsLogAdmin(admin.ModelAdmin):
    list_display = ("user", "amount", "reason", "award_key", "created_at")
    list_filter = ("reason",)
    search_fields = ("user__username", "award_key")


@admin.register(RecurringMilestone)
class RecurringMilestoneAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "period_key", "current_value", "target_value", "status", "period_end")
    list_filter = ("type", "status", "period", "difficulty")
    search_fields = ("user__username", "period_key")


class ChallengeParticipantInline(admin.TabularInline):
    model = ChallengeParticipant
    extra = 0
    readonly_fields = ("user", "co2_contributed_kg", "joined_at")


@admin.register(CommunityChallenge)
class CommunityChallengeAdmin(admin.ModelAdmin):
    list_display = ("title", "community", "current_co2_kg", "goal_co2_kg", "participant_count", "status", "end_at")
    list_filter = ("status",)
    search_fields = ("title", "community__name")
    inlines = [ChallengeParticipantInline]
