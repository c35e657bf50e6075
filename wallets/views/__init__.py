from wallets.views.wallet import (
    DepositView,
    RefundView,
    TransferView,
    WalletBalanceView,
    WalletHistoryView,
    WithdrawView,
)
from wallets.views.transaction import (
    MyTransactionListView,
    TransactionDateRangeView,
    TransactionDetailView,
    TransactionListCreateView,
    TransactionStatsView,
    WalletTransactionListView,
)

__all__ = [
    "WalletBalanceView",
    "DepositView",
    "WithdrawView",
    "TransferView",
    "WalletHistoryView",
    "RefundView",
    "MyTransactionListView",
    "WalletTransactionListView",
    "TransactionListCreateView",
    "TransactionDateRangeView",
    "TransactionStatsView",
    "TransactionDetailView",
]
