import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from accounts.models import User

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_verification_email(self, user_id: str):
    """Send the email-verification link to a newly registered account."""
    user = User.objects.filter(id=user_id).first()
    if user is None or not user.email_verification_token:
        logger.info("Skipping verification email for user %s", user_id)
        return {"user_id": user_id, "sent": False}

    link = f"{settings.FRONTEND_URL}/verify-email?token={user.email_verification_token}"
    try:
        send_mail(
            subject="Verify your email address",
            message=(
                f"Hello {user.first_name},\n\n"
                f"Please confirm your email address by opening the link below:\n{link}\n"
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except Exception as exc:
        logger.exception("Verification email to user %s failed: %s", user_id, exc)
        raise self.retry(exc=exc)

    logger.info("Verification email sent to user %s", user_id)
    return {"user_id": user_id, "sent": True}


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_password_reset_email(self, user_id: str):
    """Send the password-reset link. The token expires after one hour."""
    user = User.objects.filter(id=user_id).first()
    if user is None or not user.reset_password_token:
        logger.info("Skipping password reset email for user %s", user_id)
        return {"user_id": user_id, "sent": False}

    link = f"{settings.FRONTEND_URL}/reset-password?token={user.reset_password_token}"
    try:
        send_mail(
            subject="Reset your password",
            message=(
                f"Hello {user.first_name},\n\n"
                f"Use the link below to choose a new password:\n{link}\n\n"
                "If you did not ask for this, you can ignore this email.\n"
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except Exception as exc:
        logger.exception("Password reset email to user %s failed: %s", user_id, exc)
        raise self.retry(exc=exc)

    logger.info("Password reset email sent to user %s", user_id)
    return {"user_id": user_id, "sent": True}


@shared_task
def cleanup_expired_refresh_tokens():
    """
    Periodic task: delete refresh tokens whose expiry has passed.

    Runs daily via Celery Beat.
    """
    from accounts.services import TokenService

    return {"deleted": TokenService.cleanup_expired()}
