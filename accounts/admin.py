from django.contrib import admin

from accounts.models import RefreshToken, User
from common.admin import ReadOnlyAdminMixin


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "email",
        "first_name",
        "last_name",
        "role",
        "is_active",
        "is_email_verified",
        "is_two_factor_enabled",
        "created_at",
    )
    list_filter = ("role", "is_active", "is_email_verified", "is_two_factor_enabled")
    search_fields = ("id", "email", "first_name", "last_name")
    readonly_fields = ("id", "password", "last_login", "created_at", "updated_at")
    exclude = (
        "email_verification_token",
        "reset_password_token",
        "reset_password_expires",
        "two_factor_secret",
        "groups",
        "user_permissions",
    )


@admin.register(RefreshToken)
class RefreshTokenAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "user", "expires_at", "is_revoked", "revoked_at", "ip_address", "created_at")
    list_filter = ("is_revoked",)
    search_fields = ("user__email", "ip_address")