from django.conf import settings
from django.db import models

from common.models import BaseModel
from wallets.models.wallet import Wallet


class Transaction(BaseModel):
    """
    Append-only ledger row recording a single wallet balance change.

    Every row snapshots the balance before and after it was applied, so the
    history of a wallet reads as a running balance. Only COMPLETED rows move
    money; PENDING / FAILED / CANCELLED rows are informational.
    """

    class TransactionType(models.TextChoices):
        DEPOSIT = "deposit", "Deposit"
        WITHDRAWAL = "withdrawal", "Withdrawal"
        PAYMENT = "payment", "Payment"
        REFUND = "refund", "Refund"
        TRANSFER_IN = "transfer_in", "Transfer in"
        TRANSFER_OUT = "transfer_out", "Transfer out"
        COMMISSION = "commission", "Commission"
        BONUS = "bonus", "Bonus"
        PENALTY = "penalty", "Penalty"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    CREDIT_TYPES = (
        TransactionType.DEPOSIT,
        TransactionType.REFUND,
        TransactionType.TRANSFER_IN,
        TransactionType.COMMISSION,
        TransactionType.BONUS,
    )
    DEBIT_TYPES = (
        TransactionType.WITHDRAWAL,
        TransactionType.PAYMENT,
        TransactionType.TRANSFER_OUT,
        TransactionType.PENALTY,
    )

    wallet = models.ForeignKey(
        Wallet,
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_before = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.COMPLETED,
    )
    description = models.TextField()
    reference_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Identifier of the related object, e.g. an order id.",
    )
    reference_type = models.CharField(max_length=32, blank=True, default="")
    metadata = models.JSONField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default="")
    idempotency_key = models.UUIDField(
        unique=True,
        null=True,
        blank=True,
        editable=False,
        help_text="Client-generated UUID for idempotency.",
    )

    class Meta(BaseModel.Meta):
        indexes = [
            models.Index(fields=["wallet", "status"], name="idx_tx_wallet_status"),
            models.Index(fields=["transaction_type", "status"], name="idx_tx_type_status"),
            models.Index(fields=["reference_type", "reference_id"], name="idx_tx_reference"),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(amount__gt=0), name="transaction_amount_positive"),
        ]

    def __str__(self):
        return (
            f"Transaction {self.id} | {self.transaction_type} | "
            f"{self.amount} | {self.status}"
        )

    @property
    def is_credit(self):
        return self.transaction_type in self.CREDIT_TYPES

    @classmethod
    def completed(cls):
        return cls.objects.filter(status=cls.Status.COMPLETED)

    @classmethod
    def refunded_total_for_order(cls, order_id):
        """Sum of completed refunds already credited against an order."""
        total = (
            cls.completed()
            .filter(
                transaction_type=cls.TransactionType.REFUND,
                reference_type="order",
                reference_id=str(order_id),
            )
            .aggregate(total=models.Sum("amount"))["total"]
        )
        return total or 0
