from rest_framework import serializers

from .badges import BADGES_BY_ID
from .models import UserBadge, UserProgress
from .points import streak_multiplier


class UserBadgeSerializer(serializers.ModelSerializer):
    label = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()
    icon = serializers.SerializerMethodField()

    class Meta:
        model = UserBadge
        fields = ["badge_id", "label", "description", "icon", "earned_at"]

    def _definition(self, obj):
        return BADGES_BY_ID.get(obj.badge_id)

    def get_label(self, obj):
        badge = self._definition(obj)
        return badge.label if badge else obj.badge_id

    def get_description(self, obj):
        badge = self._definition(obj)
        return badge.description if badge else ""

    def get_icon(self, obj):
        badge = self._definition(obj)
        return badge.icon if badge else ""


class UserProgressSerializer(serializers.ModelSerializer):
    badges = serializers.SerializerMethodField()
    streak_multiplier = serializers.SerializerMethodField()

    class Meta:
        model = UserProgress
        fields = [
            "total_points",
            "total_co2_saved_kg",
            "current_streak",
            "longest_streak",
            "last_active_date_key",
            "streak_multiplier",
            "missions_count",
            "compliance_on_time_count",
            "pollution_report_count",
            "badges",
        ]

    def get_badges(self, obj):
        return UserBadgeSerializer(obj.user.badges.all(), many=True).data

    def get_streak_multiplier(self, obj):
        return streak_multiplier(obj.current_streak)


class ChallengeCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, default="Community Challenge")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    goal_co2_kg = serializers.FloatField(min_value=1, default=500)
    duration_days = serializers.IntegerField(min_value=1, max_value=90, default=7)
