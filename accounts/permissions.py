from rest_framework.permissions import BasePermission

from accounts.models import User


class RolePermission(BasePermission):
    """Grant access when the authenticated user's role is in ``allowed_roles``."""

    allowed_roles = ()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.allowed_roles)


class IsModeratorOrAbove(RolePermission):
    message = "Staff access required."
    allowed_roles = User.STAFF_ROLES


class IsAdminRole(RolePermission):
    message = "Admin access required."
    allowed_roles = User.ADMIN_ROLES


class IsSuperAdmin(RolePermission):
    message = "Super admin access required."
    allowed_roles = (User.Role.SUPER_ADMIN,)
