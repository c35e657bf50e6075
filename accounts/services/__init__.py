from accounts.services.tokens import TokenService
from accounts.services.two_factor import TOTP
from accounts.services.auth import AuthService
from accounts.services.profile import ProfileService
from accounts.services.users import UserAdminService

__all__ = [
    "TokenService",
    "TOTP",
    "AuthService",
    "ProfileService",
    "UserAdminService",
]
