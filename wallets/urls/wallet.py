from django.urls import path

from wallets.views import (
    DepositView,
    RefundView,
    TransferView,
    WalletBalanceView,
    WalletHistoryView,
    WithdrawView,
)

urlpatterns = [
    path("balance", WalletBalanceView.as_view(), name="wallet-balance"),
    path("deposit", DepositView.as_view(), name="wallet-deposit"),
    path("withdraw", WithdrawView.as_view(), name="wallet-withdraw"),
    path("transfer", TransferView.as_view(), name="wallet-transfer"),
    path("history", WalletHistoryView.as_view(), name="wallet-history"),
    path("refund", RefundView.as_view(), name="wallet-refund"),
]
