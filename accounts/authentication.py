import logging

from rest_framework import authentication, exceptions

from accounts.models import User
from accounts.services.tokens import TokenService
from common.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Authenticate ``Authorization: Bearer <access token>`` headers.

    The decoded payload is exposed as ``request.auth``.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None

        if len(header) != 2:
            raise exceptions.AuthenticationFailed("Invalid authorization header.")

        try:
            token = header[1].decode()
            payload = TokenService.decode_access_token(token)
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Invalid token")
        except AuthenticationFailed as exc:
            raise exceptions.AuthenticationFailed(exc.message)

        user = User.objects.filter(id=payload.get("sub")).first()
        if user is None or not user.is_active:
            logger.info("Rejected token for missing or inactive user %s", payload.get("sub"))
            raise exceptions.AuthenticationFailed("User not found or inactive")

        return user, payload

    def authenticate_header(self, request):
        return self.keyword
