import pyotp
from django.conf import settings


class TOTP:
    """
    Time-based one-time passwords for staff 2FA (SHA1, 6 digits, 30 s
    period), compatible with Google Authenticator and similar apps.
    """

    def __init__(self, issuer=None):
        self.issuer = issuer or getattr(settings, "TWO_FACTOR_ISSUER", "ECommerce Admin")

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def generate_code(self, secret: str, timestamp=None) -> str:
        totp = pyotp.TOTP(secret)
        if timestamp is None:
            return totp.now()
        return totp.at(int(timestamp))

    def verify_code(self, secret: str, code, window=1, timestamp=None) -> bool:
        """Accept codes from the current period and ``window`` periods either side."""
        if not secret or not code:
            return False
        return pyotp.TOTP(secret).verify(str(code).strip(), for_time=timestamp, valid_window=window)

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        return pyotp.TOTP(secret).provisioning_uri(name=account_name, issuer_name=self.issuer)
