from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from core.models import Community, CommunityMembership
from core.services import get_active_community_id_for_user, user_can_manage_community

from . import leaderboard
from .challenges import ChallengeContributionAggregator
from .engine import RewardsEngine
from .milestones import MilestoneLifecycleManager
from .progress import ProgressStore
from .serializers import ChallengeCreateSerializer, UserProgressSerializer


def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


def _is_member_or_staff(user, community):
    if user.is_staff:
        return True
    return CommunityMembership.objects.filter(community=community, user=user, is_active=True).exists()


class MyProgressView(APIView):
    """
    GET /api/gamification/progress/me/

    Totals, streak and badges. Opening this also zeroes a streak that
    already lapsed.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        progress = ProgressStore.refresh_streak(request.user)
        return Response(UserProgressSerializer(progress).data)


class ActiveMilestonesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        milestones = RewardsEngine().get_active_milestones(request.user)
        return Response({"milestones": milestones})


class MilestoneHistoryView(APIView):
    """
    GET /api/gamification/milestones/history/?page=1&limit=10
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        page = _int_param(request, "page", 1)
        limit = _int_param(request, "limit", 10)
        return Response(MilestoneLifecycleManager().get_history(request.user, page=page, limit=limit))


class MilestoneSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(MilestoneLifecycleManager().get_summary(request.user))


class CommunityChallengeView(APIView):
    """
    GET  /api/gamification/communities/<id>/challenge/  → current challenge (members)
    POST /api/gamification/communities/<id>/challenge/  → custom challenge (owner/admin)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, community_id):
        community = get_object_or_404(Community, pk=community_id, is_active=True)

        if not _is_member_or_staff(request.user, community):
            return Response({"error": "Not a member of this community"}, status=status.HTTP_403_FORBIDDEN)

        challenge = ChallengeContributionAggregator().get_current_challenge(community)
        return Response({"challenge": challenge})

    def post(self, request, community_id):
        community = get_object_or_404(Community, pk=community_id, is_active=True)

        if not user_can_manage_community(request.user, community.id):
            return Response({"error": "Not allowed"}, status=status.HTTP_403_FORBIDDEN)

        serializer = ChallengeCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        aggregator = ChallengeContributionAggregator()
        challenge = aggregator.create_challenge(
            community,
            title=serializer.validated_data["title"],
            description=serializer.validated_data["description"],
            goal_co2_kg=serializer.validated_data["goal_co2_kg"],
            duration_days=serializer.validated_data["duration_days"],
            created_by=request.user,
        )
        if challenge is None:
            return Response(
                {"error": "A challenge is already active for this community"},
                status=status.HTTP_409_CONFLICT,
            )

        return Response({"challenge": aggregator.challenge_view(challenge)}, status=status.HTTP_201_CREATED)


class CommunityChallengeHistoryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, community_id):
        community = get_object_or_404(Community, pk=community_id, is_active=True)

        if not _is_member_or_staff(request.user, community):
            return Response({"error": "Not a member of this community"}, status=status.HTTP_403_FORBIDDEN)

        return Response({"challenges": ChallengeContributionAggregator().get_history(community)})


class GlobalLeaderboardView(APIView):
    """
    GET /api/gamification/leaderboard/?page=1

    All users by total points, 20 per page.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(leaderboard.global_leaderboard(page=_int_param(request, "page", 1)))


class WeeklyLeaderboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(leaderboard.weekly_leaderboard(page=_int_param(request, "page", 1)))


class MyRankView(APIView):
    """
    GET /api/gamification/leaderboard/me/

    Global, community (when the user has one) and weekly rank.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        community_id = get_active_community_id_for_user(request.user)
        return Response(leaderboard.get_my_ranks(request.user, community_id=community_id))


class CommunityLeaderboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, community_id):
        community = get_object_or_404(Community, pk=community_id, is_active=True)

        if not _is_member_or_staff(request.user, community):
            return Response({"error": "Not a member of this community"}, status=status.HTTP_403_FORBIDDEN)

        return Response(leaderboard.community_leaderboard(community, page=_int_param(request, "page", 1)))


class CommunityStatsView(APIView):
    """
    GET /api/gamification/communities/<id>/stats/

    Monthly CO2 totals, this week's daily trend and top contributors.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, community_id):
        community = get_object_or_404(Community, pk=community_id, is_active=True)

        if not _is_member_or_staff(request.user, community):
            return Response({"error": "Not a member of this community"}, status=status.HTTP_403_FORBIDDEN)

        return Response(leaderboard.get_community_stats(community))
