import logging
import secrets
from datetime import datetime, timezone as dt_timezone

import jwt
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.models import RefreshToken
from common.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)

JWT_SECRET = getattr(settings, "JWT_SECRET", settings.SECRET_KEY)
JWT_ALGORITHM = getattr(settings, "JWT_ALGORITHM", "HS256")


class TokenService:
    """
    Issues the credential pair handed out at login.

    Access tokens are short-lived HS256 JWTs verified without a database hit.
    Refresh tokens are opaque random strings stored as RefreshToken rows so
    they can be revoked and rotated.
    """

    @staticmethod
    def create_access_token(user) -> str:
        now = datetime.now(dt_timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "type": "access",
            "iat": now,
            "exp": now + settings.JWT_ACCESS_TTL,
        }
        return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> dict:
        try:
            payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationFailed("Invalid token")

        if payload.get("type") != "access" or not payload.get("sub"):
            raise AuthenticationFailed("Invalid token")
        return payload

    @staticmethod
    def issue_refresh_token(user, ip_address=None, user_agent="") -> RefreshToken:
        return RefreshToken.objects.create(
            user=user,
            token=secrets.token_urlsafe(48),
            expires_at=timezone.now() + settings.JWT_REFRESH_TTL,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:255],
        )

    @staticmethod
    def issue_pair(user, ip_address=None, user_agent="") -> dict:
        refresh = TokenService.issue_refresh_token(user, ip_address, user_agent)
        return {
            "access_token": TokenService.create_access_token(user),
            "refresh_token": refresh.token,
            "token_type": "Bearer",
            "expires_in": int(settings.JWT_ACCESS_TTL.total_seconds()),
        }

    @staticmethod
    @transaction.atomic
    def rotate(token: str, ip_address=None, user_agent="") -> dict:
        """
        Exchange a refresh token for a new pair. The presented token is revoked.

        Raises:
            AuthenticationFailed: If the token is unknown, revoked or expired,
                or its user has been deactivated.
        """
        stored = (
            RefreshToken.objects.select_for_update()
            .select_related("user")
            .filter(token=token)
            .first()
        )
        if stored is None or not stored.is_valid():
            logger.info("Refresh rejected: token unknown, revoked or expired")
            raise AuthenticationFailed("Invalid or expired refresh token")

        if not stored.user.is_active:
            raise AuthenticationFailed("Account is deactivated")

        stored.revoke()
        return TokenService.issue_pair(stored.user, ip_address, user_agent)

    @staticmethod
    def revoke(user, token=None) -> int:
        """Revoke one refresh token of ``user``, or all of them when ``token`` is None."""
        queryset = RefreshToken.objects.filter(user=user, is_revoked=False)
        if token:
            queryset = queryset.filter(token=token)
        count = queryset.update(is_revoked=True, revoked_at=timezone.now())
        logger.info("Revoked %d refresh token(s) for user %s", count, user.id)
        return count

    @staticmethod
    def cleanup_expired() -> int:
        count, _ = RefreshToken.get_expired().delete()
        logger.info("Deleted %d expired refresh token(s)", count)
        return count
