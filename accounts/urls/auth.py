from django.urls import path

from accounts.views import (
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

urlpatterns = [
    path("register", RegisterView.as_view(), name="auth-register"),
    path("login", LoginView.as_view(), name="auth-login"),
    path("refresh", RefreshTokenView.as_view(), name="auth-refresh"),
    path("logout", LogoutView.as_view(), name="auth-logout"),
    path("logout-all", LogoutAllView.as_view(), name="auth-logout-all"),
    path("verify-email", VerifyEmailView.as_view(), name="auth-verify-email"),
    path("forgot-password", ForgotPasswordView.as_view(), name="auth-forgot-password"),
    path("reset-password", ResetPasswordView.as_view(), name="auth-reset-password"),
    path("change-password", ChangePasswordView.as_view(), name="auth-change-password"),
    path("me", MeView.as_view(), name="auth-me"),
    path("2fa/enable", EnableTwoFactorView.as_view(), name="auth-2fa-enable"),
    path("2fa/verify", VerifyTwoFactorView.as_view(), name="auth-2fa-verify"),
    path("2fa/disable", DisableTwoFactorView.as_view(), name="auth-2fa-disable"),
]
