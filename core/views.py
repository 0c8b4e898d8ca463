import time

from django.conf import settings
from django.db import connections
from django.db.utils import OperationalError
from django.shortcuts import get_object_or_404
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework import status

from .models import Community, CommunityActivity, CommunityMembership
from .serializers import CommunityActivitySerializer


class CommunityActivityFeedView(APIView):
    """
    GET /api/core/communities/<community_id>/activity/?limit=20

    Latest activity of a community, visible to its members.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, community_id):
        community = get_object_or_404(Community, id=community_id, is_active=True)

        is_member = CommunityMembership.objects.filter(
            community=community, user=request.user, is_active=True
        ).exists()
        if not (is_member or request.user.is_staff):
            return Response({"error": "Not a member of this community"}, status=status.HTTP_403_FORBIDDEN)

        try:
            limit = int(request.query_params.get("limit", 20))
        except ValueError:
            limit = 20
        limit = max(1, min(limit, 50))

        qs = (
            CommunityActivity.objects
            .filter(community=community)
            .select_related("actor")
            .order_by("-timestamp")[:limit]
        )
        serializer = CommunityActivitySerializer(qs, many=True)
        return Response({"community": community.id, "activities": serializer.data})


class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError:
            db_ok = False

        duration_ms = int((time.time() - start) * 1000)

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            },
            status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
