from accounts.views.auth import (
    ChangePasswordView,
    DisableTwoFactorView,
    EnableTwoFactorView,
    ForgotPasswordView,
    LoginView,
    LogoutAllView,
    LogoutView,
    MeView,
    RefreshTokenView,
    RegisterView,
    ResetPasswordView,
    VerifyEmailView,
    VerifyTwoFactorView,
)
from accounts.views.admin_auth import AdminLoginView, AdminRegisterView, UpdateAdminRoleView
from accounts.views.profile import AdminProfileView, ProfileView
from accounts.views.users import DeactivateUserView, UserDetailView, UserListView, UserStatsView

__all__ = [
    "RegisterView",
    "LoginView",
    "RefreshTokenView",
    "LogoutView",
    "LogoutAllView",
    "VerifyEmailView",
    "ForgotPasswordView",
    "ResetPasswordView",
    "ChangePasswordView",
    "MeView",
    "EnableTwoFactorView",
    "VerifyTwoFactorView",
    "DisableTwoFactorView",
    "AdminRegisterView",
    "AdminLoginView",
    "UpdateAdminRoleView",
    "ProfileView",
    "AdminProfileView",
    "UserListView",
    "UserStatsView",
    "UserDetailView",
    "DeactivateUserView",
]
