from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from gamification.engine import RewardsEngine

from .models import Mission, MissionCompletion
from .serializers import DailySignalSerializer, MissionCompletionSerializer, MissionSerializer
from .services import get_daily_pool, record_daily_signal


class MissionListView(APIView):
    """
    GET /api/missions/?category=food&difficulty=easy
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Mission.objects.filter(is_active=True)

        category = request.query_params.get("category")
        if category:
            qs = qs.filter(category=category)

        difficulty = request.query_params.get("difficulty")
        if difficulty:
            qs = qs.filter(difficulty=difficulty)

        completed_ids = set(
            MissionCompletion.objects.filter(user=request.user).values_list("mission_id", flat=True)
        )
        data = MissionSerializer(qs, many=True).data
        for item in data:
            item["is_completed"] = item["id"] in completed_ids

        return Response(data)


class DailyMissionsView(APIView):
    """
    GET /api/missions/daily/ → today's three suggestions (stable for the day)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pool, missions = get_daily_pool(request.user)
        completed_ids = set(
            MissionCompletion.objects
            .filter(user=request.user, date_key=pool.date_key)
            .values_list("mission_id", flat=True)
        )
        data = MissionSerializer(missions, many=True).data
        for item in data:
            item["is_completed"] = item["id"] in completed_ids

        return Response({
            "date": pool.date_key,
            "preferred_category": pool.preferred_category,
            "missions": data,
            "all_completed": bool(data) and all(item["is_completed"] for item in data),
        })


class DailySignalView(APIView):
    """
    POST /api/missions/daily/signal/
    Body: {"car_km": 22, "food_type": "non_veg", "ac_hours": 2}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = DailySignalSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        signal = record_daily_signal(request.user, **serializer.validated_data)
        return Response(DailySignalSerializer(signal).data, status=status.HTTP_200_OK)


class CompleteMissionView(APIView):
    """
    POST /api/missions/<mission_id>/complete/

    409 ALREADY_COMPLETED when the mission was completed before.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, mission_id):
        try:
            result = RewardsEngine().complete_mission(request.user, mission_id)
        except Mission.DoesNotExist:
            return Response({"error": "Mission not found"}, status=status.HTTP_404_NOT_FOUND)

        return Response(result, status=status.HTTP_201_CREATED)


class CompletedMissionsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        completions = (
            MissionCompletion.objects
            .select_related("mission")
            .filter(user=request.user)[:100]
        )
        return Response(MissionCompletionSerializer(completions, many=True).data)
