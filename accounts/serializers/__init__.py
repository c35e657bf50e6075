from accounts.serializers.user import ProfileSerializer, UserSerializer
from accounts.serializers.auth import (
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    TwoFactorCodeSerializer,
    UpdateAdminRoleSerializer,
    VerifyEmailSerializer,
)
from accounts.serializers.profile import (
    UpdateProfileSerializer,
    UpdateUserSerializer,
    UserQuerySerializer,
)

__all__ = [
    "UserSerializer",
    "ProfileSerializer",
    "RegisterSerializer",
    "LoginSerializer",
    "RefreshTokenSerializer",
    "LogoutSerializer",
    "VerifyEmailSerializer",
    "ForgotPasswordSerializer",
    "ResetPasswordSerializer",
    "ChangePasswordSerializer",
    "TwoFactorCodeSerializer",
    "UpdateAdminRoleSerializer",
    "UpdateProfileSerializer",
    "UpdateUserSerializer",
    "UserQuerySerializer",
]
