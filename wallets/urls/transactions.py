from django.urls import path

from wallets.views import (
    MyTransactionListView,
    TransactionDateRangeView,
    TransactionDetailView,
    TransactionListCreateView,
    TransactionStatsView,
    WalletTransactionListView,
)

urlpatterns = [
    path("", TransactionListCreateView.as_view(), name="transaction-list"),
    path("my", MyTransactionListView.as_view(), name="transaction-my"),
    path("stats", TransactionStatsView.as_view(), name="transaction-stats"),
    path("date-range", TransactionDateRangeView.as_view(), name="transaction-date-range"),
    path(
        "wallet/<uuid:wallet_id>",
        WalletTransactionListView.as_view(),
        name="transaction-wallet",
    ),
    path("<uuid:pk>", TransactionDetailView.as_view(), name="transaction-detail"),
]
