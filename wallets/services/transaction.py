import logging
from datetime import datetime, time, timedelta

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from common.exceptions import NotFound
from common.utils import growth_percent, to_money
from wallets.models import Transaction, Wallet
from wallets.services.ledger import LedgerService

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": "created_at",
    "amount": "amount",
    "type": "transaction_type",
    "status": "status",
}


def _as_datetime(value, end_of_day=False):
    """Accept dates or datetimes from query params and return an aware datetime."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end_of_day else time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def _totals(queryset):
    row = queryset.aggregate(total=Sum("amount"), count=Count("id"))
    return {"amount": to_money(row["total"] or 0), "count": row["count"]}


class TransactionService:
    """Read side of the ledger plus admin-created ledger rows."""

    @staticmethod
    def get_transaction(transaction_id, user) -> Transaction:
        tx = (
            Transaction.objects.select_related("wallet", "user")
            .filter(id=transaction_id)
            .first()
        )
        if tx is None or (tx.user_id != user.id and not user.is_admin):
            raise NotFound(f"Transaction with ID {transaction_id} not found")
        return tx

    @staticmethod
    def filter_queryset(queryset, filters, search_user_email=False):
        """
        Apply the ledger query filters to ``queryset``.

        ``filters`` is the validated data of TransactionQuerySerializer.
        """
        tx_type = filters.get("type")
        if tx_type:
            queryset = queryset.filter(transaction_type=tx_type)

        tx_status = filters.get("status")
        if tx_status:
            queryset = queryset.filter(status=tx_status)

        start = _as_datetime(filters.get("start_date"))
        if start:
            queryset = queryset.filter(created_at__gte=start)

        end = _as_datetime(filters.get("end_date"), end_of_day=True)
        if end:
            queryset = queryset.filter(created_at__lte=end)

        if filters.get("min_amount") is not None:
            queryset = queryset.filter(amount__gte=filters["min_amount"])
        if filters.get("max_amount") is not None:
            queryset = queryset.filter(amount__lte=filters["max_amount"])

        search = filters.get("search")
        if search:
            condition = Q(description__icontains=search) | Q(reference_id__icontains=search)
            if search_user_email:
                condition |= Q(user__email__icontains=search)
            queryset = queryset.filter(condition)

        sort_field = SORT_FIELDS.get(filters.get("sort_by") or "created_at", "created_at")
        if (filters.get("sort_order") or "desc").lower() == "desc":
            sort_field = f"-{sort_field}"
        return queryset.order_by(sort_field)

    @staticmethod
    def wallet_summary(wallet) -> dict:
        """Totals over the wallet's COMPLETED ledger rows."""
        row = Transaction.completed().filter(wallet=wallet).aggregate(
            total_credits=Sum("amount", filter=Q(transaction_type__in=Transaction.CREDIT_TYPES)),
            total_debits=Sum("amount", filter=Q(transaction_type__in=Transaction.DEBIT_TYPES)),
            total_transactions=Count("id"),
        )
        return {
            "total_credits": to_money(row["total_credits"] or 0),
            "total_debits": to_money(row["total_debits"] or 0),
            "total_transactions": row["total_transactions"],
            "current_balance": to_money(wallet.balance),
        }

    @staticmethod
    def wallet_transactions(wallet_id, user, filters):
        """
        Ledger rows of one wallet, visible to its owner and to admins.

        Returns:
            (filtered queryset, summary dict)
        """
        wallet = Wallet.objects.filter(id=wallet_id).first()
        if wallet is None or (wallet.user_id != user.id and not user.is_admin):
            raise NotFound(f"Wallet with ID {wallet_id} not found")

        queryset = TransactionService.filter_queryset(wallet.transactions.all(), filters)
        return queryset, TransactionService.wallet_summary(wallet)

    @staticmethod
    def my_transactions(user, filters):
        wallet = Wallet.objects.filter(user=user).first()
        if wallet is None:
            raise NotFound("Wallet not found")
        return TransactionService.wallet_transactions(wallet.id, user, filters)

    @staticmethod
    def list_transactions(filters):
        queryset = Transaction.objects.select_related("user", "wallet")
        return TransactionService.filter_queryset(queryset, filters, search_user_email=True)

    @staticmethod
    def by_date_range(start_date, end_date, transaction_type=None) -> dict:
        """Completed rows created in [start_date, end_date] and a per-type summary."""
        queryset = Transaction.completed().filter(
            created_at__gte=_as_datetime(start_date),
            created_at__lte=_as_datetime(end_date, end_of_day=True),
        )
        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type)

        by_type = list(
            queryset.order_by()
            .values("transaction_type")
            .annotate(count=Count("id"), total=Sum("amount"))
            .order_by("transaction_type")
        )

        total_credits = to_money(0)
        total_debits = to_money(0)
        for item in by_type:
            if item["transaction_type"] in Transaction.CREDIT_TYPES:
                total_credits += to_money(item["total"])
            else:
                total_debits += to_money(item["total"])

        transactions = list(queryset.select_related("user").order_by("-created_at"))
        return {
            "transactions": transactions,
            "date_range": {"start_date": start_date, "end_date": end_date},
            "summary": {
                "by_type": [
                    {
                        "type": item["transaction_type"],
                        "count": item["count"],
                        "total": to_money(item["total"]),
                    }
                    for item in by_type
                ],
                "total_credits": total_credits,
                "total_debits": total_debits,
                "net_amount": total_credits - total_debits,
                "total_transactions": len(transactions),
            },
        }

    @staticmethod
    @transaction.atomic
    def create_transaction(
        wallet_id,
        transaction_type,
        amount,
        description,
        status=Transaction.Status.COMPLETED,
        reference_id="",
        reference_type="",
        metadata=None,
        ip_address=None,
        user_agent="",
    ) -> Transaction:
        """Write a ledger row by hand. Only COMPLETED rows move the balance."""
        try:
            wallet = Wallet.objects.select_for_update().get(id=wallet_id)
        except Wallet.DoesNotExist:
            raise NotFound(f"Wallet with ID {wallet_id} not found")

        tx = LedgerService.post(
            wallet,
            transaction_type,
            amount,
            description,
            status=status,
            reference_id=reference_id,
            reference_type=reference_type,
            metadata=metadata,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("Transaction created by admin: %s - %s - %s", tx.id, transaction_type, tx.amount)
        return tx

    @staticmethod
    def stats() -> dict:
        now = timezone.localtime()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_month = start_of_day.replace(day=1)
        start_of_last_month = (start_of_month - timedelta(days=1)).replace(day=1)
        start_of_year = start_of_month.replace(month=1)
        thirty_days_ago = now - timedelta(days=30)

        completed = Transaction.completed()

        this_month = _totals(completed.filter(created_at__gte=start_of_month))
        last_month = _totals(
            completed.filter(created_at__gte=start_of_last_month, created_at__lt=start_of_month)
        )
        this_month["growth"] = growth_percent(this_month["amount"], last_month["amount"])

        by_type = (
            completed.order_by()
            .values("transaction_type")
            .annotate(count=Count("id"), total=Sum("amount"))
            .order_by("transaction_type")
        )
        by_status = (
            Transaction.objects.order_by().values("status").annotate(count=Count("id"))
        )
        daily_volume = (
            completed.filter(created_at__gte=thirty_days_ago)
            .annotate(date=TruncDate("created_at"))
            .values("date")
            .annotate(count=Count("id"), total=Sum("amount"))
            .order_by("date")
        )

        return {
            "overview": {
                "total_transactions": completed.count(),
                "today": _totals(completed.filter(created_at__gte=start_of_day)),
                "this_month": this_month,
                "last_month": last_month,
                "this_year": _totals(completed.filter(created_at__gte=start_of_year)),
            },
            "by_type": [
                {"type": row["transaction_type"], "count": row["count"], "total": to_money(row["total"])}
                for row in by_type
            ],
            "by_status": {row["status"]: row["count"] for row in by_status},
            "large_transactions": list(
                completed.select_related("user").order_by("-amount", "-created_at")[:10]
            ),
            "recent_transactions": list(
                Transaction.objects.select_related("user").order_by("-created_at")[:20]
            ),
            "daily_volume": [
                {"date": row["date"], "count": row["count"], "total": to_money(row["total"])}
                for row in daily_volume
            ],
        }
