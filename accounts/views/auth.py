import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.serializers import (
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    TwoFactorCodeSerializer,
    UserSerializer,
    VerifyEmailSerializer,
)
from accounts.services import AuthService
from common.utils import client_ip, user_agent

logger = logging.getLogger(__name__)


def login_response(result):
    """Render the outcome of AuthService.login."""
    if result.get("requires_two_factor"):
        return Response(result, status=status.HTTP_200_OK)
    body = dict(result)
    body["user"] = UserSerializer(result["user"]).data
    return Response(body, status=status.HTTP_200_OK)


class RegisterView(APIView):
    """POST /api/auth/register — Create a shop account and its wallet."""

    permission_classes = [AllowAny]
    throttle_scope = "register"

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.register_user(**serializer.validated_data)
        return Response(
            {
                "message": "User registered successfully. Please check your email for verification.",
                "user_id": str(user.id),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """
    POST /api/auth/login

    Request body: {"email": ..., "password": ..., "two_factor_code": "<optional>"}
    """

    permission_classes = [AllowAny]
    throttle_scope = "login"
    staff_only = False

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.login(
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
            two_factor_code=serializer.validated_data.get("two_factor_code"),
            ip_address=client_ip(request),
            user_agent=user_agent(request),
            staff_only=self.staff_only,
        )
        return login_response(result)


class RefreshTokenView(APIView):
    """POST /api/auth/refresh — Rotate a refresh token into a new pair."""

    permission_classes = [AllowAny]
    throttle_scope = "login"

    def post(self, request, *args, **kwargs):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tokens = AuthService.refresh(
            serializer.validated_data["refresh_token"],
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )
        return Response(tokens, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """POST /api/auth/logout — Revoke the given refresh token, or every active one."""

    def post(self, request, *args, **kwargs):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.logout(request.user, serializer.validated_data.get("refresh_token"))
        return Response({"message": "Logged out successfully"})


class LogoutAllView(APIView):
    """POST /api/auth/logout-all"""

    def post(self, request, *args, **kwargs):
        AuthService.logout_all(request.user)
        return Response({"message": "Logged out from all devices successfully"})


class VerifyEmailView(APIView):
    """GET|POST /api/auth/verify-email — token in the query string or body."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        return self._verify(request.query_params)

    def post(self, request, *args, **kwargs):
        return self._verify(request.data)

    def _verify(self, data):
        serializer = VerifyEmailSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        AuthService.verify_email(serializer.validated_data["token"])
        return Response({"message": "Email verified successfully"})


class ForgotPasswordView(APIView):
    """POST /api/auth/forgot-password — Same answer whether or not the email exists."""

    permission_classes = [AllowAny]
    throttle_scope = "password_reset"

    def post(self, request, *args, **kwargs):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.request_password_reset(serializer.validated_data["email"])
        return Response({"message": "If the email exists, a reset link has been sent"})


class ResetPasswordView(APIView):
    """POST /api/auth/reset-password"""

    permission_classes = [AllowAny]
    throttle_scope = "password_reset"

    def post(self, request, *args, **kwargs):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.reset_password(
            serializer.validated_data["token"], serializer.validated_data["new_password"]
        )
        return Response({"message": "Password reset successfully"})


class ChangePasswordView(APIView):
    """POST /api/auth/change-password"""

    throttle_scope = "profile"

    def post(self, request, *args, **kwargs):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.change_password(
            request.user,
            serializer.validated_data["current_password"],
            serializer.validated_data["new_password"],
        )
        return Response({"message": "Password changed successfully"})


class MeView(APIView):
    """GET /api/auth/me — The authenticated identity."""

    def get(self, request, *args, **kwargs):
        return Response(UserSerializer(request.user).data)


class EnableTwoFactorView(APIView):
    """POST /api/auth/2fa/enable — Staff only. Returns the secret and otpauth URI."""

    throttle_scope = "two_factor"

    def post(self, request, *args, **kwargs):
        return Response(AuthService.enable_two_factor(request.user))


class VerifyTwoFactorView(APIView):
    """POST /api/auth/2fa/verify — Confirm a code and switch 2FA on."""

    throttle_scope = "two_factor"

    def post(self, request, *args, **kwargs):
        serializer = TwoFactorCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        AuthService.verify_two_factor(request.user, serializer.validated_data["code"])
        return Response(
            {"message": "2FA enabled successfully. You will need to provide a code on every login."}
        )


class DisableTwoFactorView(APIView):
    """POST /api/auth/2fa/disable"""

    throttle_scope = "two_factor"

    def post(self, request, *args, **kwargs):
        AuthService.disable_two_factor(request.user)
        return Response({"message": "2FA disabled successfully"})
