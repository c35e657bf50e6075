from accounts.models.user import Admin, User
from accounts.models.refresh_token import RefreshToken

__all__ = ["Admin", "User", "RefreshToken"]
