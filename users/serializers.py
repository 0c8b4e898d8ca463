from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'display_name',
            'profile_picture',
            'is_onboarded',
            'date_joined',
        ]
        read_only_fields = ['id', 'username', 'date_joined']


class PushTokenSerializer(serializers.Serializer):
    push_token = serializers.CharField(max_length=255, allow_blank=True)

    def validate_push_token(self, value):
        value = value.strip()
        if value and not value.startswith(("ExponentPushToken[", "ExpoPushToken[")):
            raise serializers.ValidationError("Not an Expo push token.")
        return value
