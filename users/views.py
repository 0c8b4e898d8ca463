from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import PushTokenSerializer, UserSerializer


class ProfileViewSet(viewsets.GenericViewSet):
    """
    API for the signed-in user's own profile.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    def get_object(self):
        return self.request.user

    @action(detail=False, methods=['get', 'patch'], url_path='me')
    def me(self, request):
        """
        GET   /api/users/profile/me/
        PATCH /api/users/profile/me/  {display_name, profile_picture, is_onboarded}
        """
        user = self.get_object()
        if request.method == 'GET':
            return Response(UserSerializer(user).data)

        serializer = UserSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=['post'], url_path='push-token')
    def push_token(self, request):
        """
        Register (or clear, with "") the Expo push token of this device.

        POST /api/users/profile/push-token/
        Body: {"push_token": "ExponentPushToken[...]"}
        """
        serializer = PushTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = self.get_object()
        user.push_token = serializer.validated_data['push_token']
        user.save(update_fields=['push_token'])

        return Response({'push_token_registered': bool(user.push_token)})
