from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsModeratorOrAbove
from accounts.serializers import ProfileSerializer, UpdateProfileSerializer
from accounts.services import ProfileService


class ProfileView(APIView):
    """GET|PATCH /api/profile/ — The caller's profile with a wallet summary."""

    throttle_scope = "profile"

    def get(self, request, *args, **kwargs):
        return Response(ProfileSerializer(ProfileService.get_profile(request.user)).data)

    def patch(self, request, *args, **kwargs):
        serializer = UpdateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = ProfileService.update_profile(request.user, **serializer.validated_data)
        return Response(ProfileSerializer(user).data)


class AdminProfileView(APIView):
    """GET|PATCH /api/profile/admin — Moderators and above."""

    permission_classes = [IsModeratorOrAbove]
    throttle_scope = "profile"

    def get(self, request, *args, **kwargs):
        return Response(ProfileSerializer(ProfileService.get_admin_profile(request.user)).data)

    def patch(self, request, *args, **kwargs):
        serializer = UpdateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = ProfileService.update_admin_profile(request.user, **serializer.validated_data)
        return Response(ProfileSerializer(user).data)
