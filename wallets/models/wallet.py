from decimal import Decimal

from django.conf import settings
from django.db import models

from common.models import BaseModel


class Wallet(BaseModel):
    """
    A user's stored balance, the only payment instrument used at checkout.

    Uses DecimalField for the balance (two decimal places). Concurrency safety
    is handled at the service layer via select_for_update(); the check
    constraint makes a negative balance impossible at the database level.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="wallet",
    )
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta(BaseModel.Meta):
        constraints = [
            models.CheckConstraint(
                check=models.Q(balance__gte=0), name="wallet_balance_non_negative"
            ),
        ]

    def __str__(self):
        return f"Wallet {self.id} (balance={self.balance})"
