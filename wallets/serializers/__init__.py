from wallets.serializers.wallet import WalletSerializer
from wallets.serializers.amount import AmountSerializer, RefundSerializer, TransferSerializer
from wallets.serializers.transaction import (
    AdminTransactionSerializer,
    CreateTransactionSerializer,
    DateRangeSerializer,
    TransactionQuerySerializer,
    TransactionSerializer,
)

__all__ = [
    "WalletSerializer",
    "AmountSerializer",
    "TransferSerializer",
    "RefundSerializer",
    "TransactionSerializer",
    "AdminTransactionSerializer",
    "TransactionQuerySerializer",
    "DateRangeSerializer",
    "CreateTransactionSerializer",
]
