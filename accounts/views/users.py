import logging

from rest_framework.generics import ListAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from accounts.serializers import (
    ProfileSerializer,
    UpdateUserSerializer,
    UserQuerySerializer,
)
from accounts.services import UserAdminService

logger = logging.getLogger(__name__)


class UserListView(ListAPIView):
    """
    GET /api/users/ — Paginated accounts (admin only).

    Query params: search (email or name), role, is_active
    """

    serializer_class = ProfileSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        serializer = UserQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return UserAdminService.list_users(**serializer.validated_data)


class UserStatsView(APIView):
    """GET /api/users/stats"""

    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        return Response(UserAdminService.stats())


class UserDetailView(APIView):
    """GET|PUT|PATCH /api/users/<id>"""

    permission_classes = [IsAdminRole]
    throttle_scope = "admin_write"

    def get(self, request, pk, *args, **kwargs):
        return Response(ProfileSerializer(UserAdminService.get_user(pk)).data)

    def put(self, request, pk, *args, **kwargs):
        serializer = UpdateUserSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = UserAdminService.update_user(request.user, pk, **serializer.validated_data)
        return Response(ProfileSerializer(user).data)

    patch = put


class DeactivateUserView(APIView):
    """PATCH /api/users/<id>/deactivate"""

    permission_classes = [IsAdminRole]
    throttle_scope = "admin_write"

    def patch(self, request, pk, *args, **kwargs):
        user = UserAdminService.deactivate_user(request.user, pk)
        return Response(
            {"message": "User deactivated successfully", "user": ProfileSerializer(user).data}
        )
