import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from accounts.models import User
from accounts.services.tokens import TokenService
from common.exceptions import InvalidOperation, NotFound, PermissionDenied

logger = logging.getLogger(__name__)


class UserAdminService:
    """Account administration for admins and super admins."""

    @staticmethod
    def list_users(search=None, role=None, is_active=None):
        queryset = User.objects.select_related("wallet").order_by("-created_at")
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        if role:
            queryset = queryset.filter(role=role)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset

    @staticmethod
    def get_user(user_id) -> User:
        user = User.objects.select_related("wallet").filter(id=user_id).first()
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    @transaction.atomic
    def update_user(actor, user_id, **changes) -> User:
        """
        Update names, phone, role or active flag of an account.

        Only a super_admin may grant or revoke staff roles, and a super_admin
        account can only be modified by itself.
        """
        target = UserAdminService.get_user(user_id)

        if target.is_super_admin and target.pk != actor.pk:
            raise PermissionDenied("Cannot modify a super admin account")
        if changes.get("is_active") is False and target.pk == actor.pk:
            raise InvalidOperation("You cannot deactivate your own account")

        new_role = changes.get("role")
        if new_role and new_role != target.role:
            touches_staff = new_role in User.STAFF_ROLES or target.role in User.STAFF_ROLES
            if touches_staff and not actor.is_super_admin:
                raise PermissionDenied("Only super admins can grant or revoke staff roles")

        fields = []
        for name in ("first_name", "last_name", "phone_number", "role", "is_active"):
            if name in changes and changes[name] is not None:
                setattr(target, name, changes[name])
                fields.append(name)

        if fields:
            target.save(update_fields=[*fields, "updated_at"])
            logger.info("User %s updated by %s: %s", target.id, actor.id, ",".join(fields))

        if "is_active" in fields and not target.is_active:
            TokenService.revoke(target)
        return target

    @staticmethod
    @transaction.atomic
    def deactivate_user(actor, user_id) -> User:
        target = UserAdminService.get_user(user_id)
        if target.pk == actor.pk:
            raise InvalidOperation("You cannot deactivate your own account")
        if target.is_super_admin:
            raise PermissionDenied("Cannot deactivate a super admin account")

        target.is_active = False
        target.save(update_fields=["is_active", "updated_at"])
        TokenService.revoke(target)
        logger.info("User %s deactivated by %s", target.id, actor.id)
        return target

    @staticmethod
    def stats() -> dict:
        start_of_month = timezone.localtime().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        totals = User.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True)),
            verified=Count("id", filter=Q(is_email_verified=True)),
            new_this_month=Count("id", filter=Q(created_at__gte=start_of_month)),
        )
        by_role = {role: 0 for role in User.Role.values}
        for row in User.objects.order_by().values("role").annotate(count=Count("id")):
            by_role[row["role"]] = row["count"]

        return {
            "total_users": totals["total"],
            "active_users": totals["active"],
            "inactive_users": totals["total"] - totals["active"],
            "verified_users": totals["verified"],
            "unverified_users": totals["total"] - totals["verified"],
            "new_users_this_month": totals["new_this_month"],
            "by_role": by_role,
        }
