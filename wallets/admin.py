from django.contrib import admin

from common.admin import ReadOnlyAdminMixin
from wallets.models import Transaction, Wallet


@admin.register(Wallet)
class WalletAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    # Balances move only through LedgerService.post.
    list_display = ("id", "user", "balance", "updated_at")
    list_select_related = ("user",)
    search_fields = ("id", "user__email")


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "transaction_type",
        "amount",
        "balance_after",
        "status",
        "reference_type",
        "created_at",
    )
    list_filter = ("transaction_type", "status", "reference_type")
    list_select_related = ("user",)
    search_fields = ("id", "user__email", "reference_id", "description")
    date_hierarchy = "created_at"
