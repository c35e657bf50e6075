from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import BaseModel


class RefreshToken(BaseModel):
    """
    A long-lived session credential exchanged for new access tokens.

    Rows are never reused: a refresh rotates the token (old row revoked,
    new row issued) and logout revokes rows in place.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="refresh_tokens",
    )
    token = models.CharField(max_length=128, unique=True)
    expires_at = models.DateTimeField()
    is_revoked = models.BooleanField(default=False)
    revoked_at = models.DateTimeField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")

    class Meta(BaseModel.Meta):
        indexes = [
            models.Index(fields=["user", "is_revoked"], name="idx_refresh_user_revoked"),
        ]

    def __str__(self):
        return f"RefreshToken {self.id} | {self.user_id} | revoked={self.is_revoked}"

    def is_valid(self):
        return not self.is_revoked and self.expires_at > timezone.now()

    def revoke(self):
        self.is_revoked = True
        self.revoked_at = timezone.now()
        self.save(update_fields=["is_revoked", "revoked_at", "updated_at"])

    @classmethod
    def get_expired(cls):
        """Return tokens whose expiry has passed."""
        return cls.objects.filter(expires_at__lt=timezone.now())
