from rest_framework import serializers
from .models import Community, CommunityActivity


class CommunitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Community
        fields = [
            'id',
            'name',
            'slug',
            'type',
            'description',
            'total_co2_saved_kg',
            'total_points',
        ]


class CommunityActivitySerializer(serializers.ModelSerializer):
    actor_name = serializers.SerializerMethodField()

    class Meta:
        model = CommunityActivity
        fields = [
            'id',
            'actor',
            'actor_name',
            'verb',
            'metadata',
            'timestamp',
        ]

    def get_actor_name(self, obj):
        if obj.actor is None:
            return None
        return obj.actor.public_name
