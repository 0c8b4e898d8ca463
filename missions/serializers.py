from rest_framework import serializers

from .models import DailySignal, Mission, MissionCompletion


class MissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Mission
        fields = [
            "id",
            "title",
            "description",
            "category",
            "difficulty",
            "co2_saved_kg",
            "base_points",
            "icon",
        ]


class MissionCompletionSerializer(serializers.ModelSerializer):
    mission = MissionSerializer(read_only=True)

    class Meta:
        model = MissionCompletion
        fields = [
            "id",
            "mission",
            "points_awarded",
            "co2_saved_awarded",
            "date_key",
            "completed_at",
        ]


class DailySignalSerializer(serializers.ModelSerializer):
    class Meta:
        model = DailySignal
        fields = ["car_km", "food_type", "ac_hours", "date_key"]
        read_only_fields = ["date_key"]

    def validate_car_km(self, value):
        if value < 0:
            raise serializers.ValidationError("Distance cannot be negative.")
        return value

    def validate_ac_hours(self, value):
        if not 0 <= value <= 24:
            raise serializers.ValidationError("AC hours must be between 0 and 24.")
        return value
