from django.urls import path

from accounts.views import (
    AdminLoginView,
    AdminRegisterView,
    DisableTwoFactorView,
    EnableTwoFactorView,
    VerifyTwoFactorView,
    UpdateAdminRoleView,
)

urlpatterns = [
    path("register", AdminRegisterView.as_view(), name="admin-auth-register"),
    path("login", AdminLoginView.as_view(), name="admin-auth-login"),
    path("<uuid:user_id>/role", UpdateAdminRoleView.as_view(), name="admin-auth-role"),
    path("2fa/enable", EnableTwoFactorView.as_view(), name="admin-auth-2fa-enable"),
    path("2fa/verify", VerifyTwoFactorView.as_view(), name="admin-auth-2fa-verify"),
    path("2fa/disable", DisableTwoFactorView.as_view(), name="admin-auth-2fa-disable"),
]
