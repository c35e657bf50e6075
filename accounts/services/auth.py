import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.models import Admin, User
from accounts.services.tokens import TokenService
from accounts.services.two_factor import TOTP
from accounts.tasks import send_password_reset_email, send_verification_email
from common.exceptions import (
    AuthenticationFailed,
    Conflict,
    InvalidOperation,
    NotFound,
    PermissionDenied,
)
from wallets.services import WalletService

logger = logging.getLogger(__name__)

PASSWORD_RESET_TTL = timedelta(minutes=getattr(settings, "PASSWORD_RESET_TTL_MINUTES", 60))


def _queue_verification_email(user):
    transaction.on_commit(lambda: send_verification_email.delay(str(user.id)))


class AuthService:
    """
    Registration, login and credential management for shop users and staff.

    Registration creates the account and its wallet in one atomic block.
    Emails are queued as Celery tasks once the surrounding transaction commits.
    """

    @staticmethod
    def _new_token() -> str:
        return secrets.token_hex(32)

    @staticmethod
    @transaction.atomic
    def register_user(email, password, first_name, last_name, phone_number="") -> User:
        """
        Create a ``user`` role account with an empty wallet.

        Raises:
            Conflict: If the email is already registered.
        """
        email = email.lower()
        if User.objects.filter(email=email).exists():
            raise Conflict("Email already registered")

        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number or "",
            role=User.Role.USER,
            email_verification_token=AuthService._new_token(),
        )
        WalletService.create_wallet(user)
        _queue_verification_email(user)

        logger.info("User registered: user=%s", user.id)
        return user

    @staticmethod
    @transaction.atomic
    def register_admin(email, password, first_name, last_name, phone_number="", invited_by=None) -> User:
        """
        Create a staff account.

        The very first staff account becomes super_admin without an invitation.
        After that only an existing super_admin may invite, and invitees get
        the ``admin`` role.
        """
        email = email.lower()

        if not Admin.objects.exists():
            role = User.Role.SUPER_ADMIN
        else:
            if invited_by is None:
                raise PermissionDenied(
                    "Admin registration requires invitation from existing super admin"
                )
            inviter = User.objects.filter(id=invited_by).first()
            if inviter is None:
                raise NotFound("Inviting admin not found")
            if not inviter.is_super_admin:
                raise PermissionDenied("Only super admins can create new admins")
            role = User.Role.ADMIN

        if User.objects.filter(email=email).exists():
            raise Conflict("Email already registered")

        admin = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number or "",
            role=role,
            email_verification_token=AuthService._new_token(),
        )
        WalletService.create_wallet(admin)
        _queue_verification_email(admin)

        logger.info("Admin registered: user=%s role=%s invited_by=%s", admin.id, role, invited_by)
        return admin

    @staticmethod
    def login(email, password, two_factor_code=None, ip_address=None, user_agent="", staff_only=False) -> dict:
        """
        Check credentials and issue a token pair.

        Staff accounts with 2FA enabled must also present a valid TOTP code;
        without one the result is ``{"requires_two_factor": True, ...}`` and
        no tokens are issued.
        """
        user = User.objects.filter(email=(email or "").lower()).first()
        if user is None or not user.check_password(password):
            logger.info("Login failed for %s", email)
            raise AuthenticationFailed("Invalid email or password")

        if staff_only and not user.is_staff:
            raise PermissionDenied("Admin access required")

        if not user.is_active:
            raise AuthenticationFailed("Account is deactivated")

        if not user.is_email_verified:
            raise AuthenticationFailed("Please verify your email first")

        if user.is_staff and user.is_two_factor_enabled:
            if not two_factor_code:
                return {"requires_two_factor": True, "message": "Please provide 2FA code"}
            if not user.two_factor_secret:
                raise AuthenticationFailed("2FA is not set up for this account")
            if not TOTP().verify_code(user.two_factor_secret, two_factor_code):
                logger.warning("Invalid 2FA code for user %s", user.id)
                raise AuthenticationFailed("Invalid 2FA code")

        user.last_login = timezone.now()
        user.save(update_fields=["last_login", "updated_at"])

        tokens = TokenService.issue_pair(user, ip_address, user_agent)
        logger.info("User logged in: user=%s ip=%s", user.id, ip_address)
        return {**tokens, "user": user}

    @staticmethod
    def refresh(refresh_token, ip_address=None, user_agent="") -> dict:
        return TokenService.rotate(refresh_token, ip_address, user_agent)

    @staticmethod
    def logout(user, refresh_token=None) -> int:
        return TokenService.revoke(user, refresh_token)

    @staticmethod
    def logout_all(user) -> int:
        return TokenService.revoke(user)

    @staticmethod
    def verify_email(token) -> User:
        user = User.objects.filter(email_verification_token=token).first() if token else None
        if user is None:
            raise InvalidOperation("Invalid verification token")

        user.is_email_verified = True
        user.email_verification_token = None
        user.save(update_fields=["is_email_verified", "email_verification_token", "updated_at"])
        logger.info("Email verified: user=%s", user.id)
        return user

    @staticmethod
    @transaction.atomic
    def request_password_reset(email) -> None:
        """Set a reset token and queue the email. Unknown emails are silently ignored."""
        user = User.objects.filter(email=(email or "").lower()).first()
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        user.reset_password_token = AuthService._new_token()
        user.reset_password_expires = timezone.now() + PASSWORD_RESET_TTL
        user.save(update_fields=["reset_password_token", "reset_password_expires", "updated_at"])

        transaction.on_commit(lambda: send_password_reset_email.delay(str(user.id)))
        logger.info("Password reset requested: user=%s", user.id)

    @staticmethod
    @transaction.atomic
    def reset_password(token, new_password) -> User:
        user = (
            User.objects.filter(reset_password_token=token, reset_password_expires__gt=timezone.now()).first()
            if token
            else None
        )
        if user is None:
            raise InvalidOperation("Invalid or expired reset token")

        user.set_password(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        user.save(
            update_fields=["password", "reset_password_token", "reset_password_expires", "updated_at"]
        )
        TokenService.revoke(user)
        logger.info("Password reset: user=%s", user.id)
        return user

    @staticmethod
    def change_password(user, current_password, new_password) -> None:
        if not user.check_password(current_password):
            raise AuthenticationFailed("Current password is incorrect")
        if current_password == new_password:
            raise InvalidOperation("New password must be different from current password")

        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        logger.info("Password changed: user=%s", user.id)

    @staticmethod
    def update_admin_role(actor, target_id, role) -> User:
        if not actor.is_super_admin:
            raise PermissionDenied("Only super admins can change roles")

        target = User.objects.filter(id=target_id).first()
        if target is None:
            raise NotFound("Admin not found")
        if target.is_super_admin:
            raise PermissionDenied("Cannot change super admin role")
        if target.role == User.Role.USER:
            raise InvalidOperation("Cannot change regular user role via admin endpoint")
        if role not in (User.Role.ADMIN, User.Role.MODERATOR):
            raise InvalidOperation("Role must be admin or moderator")

        target.role = role
        target.save(update_fields=["role", "updated_at"])
        logger.info("Admin role updated: target=%s role=%s by=%s", target.id, role, actor.id)
        return target

    @staticmethod
    def enable_two_factor(user) -> dict:
        if not user.is_staff:
            raise PermissionDenied("2FA is only available for admin accounts")

        totp = TOTP()
        secret = totp.generate_secret()
        user.two_factor_secret = secret
        user.save(update_fields=["two_factor_secret", "updated_at"])

        return {
            "secret": secret,
            "otpauth_url": totp.provisioning_uri(secret, user.email),
            "message": "Add this key to Google Authenticator or Authy, then verify a code",
        }

    @staticmethod
    def verify_two_factor(user, code) -> None:
        if not user.two_factor_secret:
            raise InvalidOperation("2FA is not set up. Please enable 2FA first.")
        if not TOTP().verify_code(user.two_factor_secret, code):
            raise InvalidOperation("Invalid 2FA code")

        user.is_two_factor_enabled = True
        user.save(update_fields=["is_two_factor_enabled", "updated_at"])
        logger.info("2FA enabled: user=%s", user.id)

    @staticmethod
    def disable_two_factor(user) -> None:
        user.is_two_factor_enabled = False
        user.two_factor_secret = None
        user.save(update_fields=["is_two_factor_enabled", "two_factor_secret", "updated_at"])
        logger.info("2FA disabled: user=%s", user.id)
