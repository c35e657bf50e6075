import logging

from accounts.models import User
from common.exceptions import PermissionDenied

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "phone_number")


class ProfileService:
    @staticmethod
    def get_profile(user) -> User:
        return User.objects.select_related("wallet").get(pk=user.pk)

    @staticmethod
    def update_profile(user, **changes) -> User:
        fields = [name for name in EDITABLE_FIELDS if name in changes]
        for name in fields:
            value = changes[name]
            if name == "phone_number":
                value = value or ""
            setattr(user, name, value)
        if fields:
            user.save(update_fields=[*fields, "updated_at"])
            logger.info("Profile updated: user=%s fields=%s", user.id, ",".join(fields))
        return ProfileService.get_profile(user)

    @staticmethod
    def get_admin_profile(user) -> User:
        if not user.is_staff:
            raise PermissionDenied("Not an admin")
        return ProfileService.get_profile(user)

    @staticmethod
    def update_admin_profile(user, **changes) -> User:
        if not user.is_staff:
            raise PermissionDenied("Not an admin")
        return ProfileService.update_profile(user, **changes)
