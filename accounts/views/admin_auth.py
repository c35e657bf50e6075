import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsSuperAdmin
from accounts.serializers import RegisterSerializer, UpdateAdminRoleSerializer, UserSerializer
from accounts.services import AuthService
from accounts.views.auth import LoginView

logger = logging.getLogger(__name__)


class AdminRegisterView(APIView):
    """
    POST /api/admin/auth/register

    The first staff account needs no invitation and becomes super_admin.
    Afterwards the caller must be an authenticated super_admin.
    """

    permission_classes = [AllowAny]
    throttle_scope = "register"

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invited_by = request.user.id if request.user and request.user.is_authenticated else None
        admin = AuthService.register_admin(invited_by=invited_by, **serializer.validated_data)
        return Response(
            {
                "message": "Admin registered successfully. Please check your email for verification.",
                "user_id": str(admin.id),
                "role": admin.role,
            },
            status=status.HTTP_201_CREATED,
        )


class AdminLoginView(LoginView):
    """POST /api/admin/auth/login — Same as login, but staff accounts only."""

    staff_only = True


class UpdateAdminRoleView(APIView):
    """PATCH /api/admin/auth/<user_id>/role — Super admin only."""

    permission_classes = [IsSuperAdmin]
    throttle_scope = "admin_write"

    def patch(self, request, user_id, *args, **kwargs):
        serializer = UpdateAdminRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        target = AuthService.update_admin_role(
            request.user, user_id, serializer.validated_data["role"]
        )
        return Response(
            {"message": "Admin role updated successfully", "user": UserSerializer(target).data}
        )
