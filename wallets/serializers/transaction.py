from decimal import Decimal

from rest_framework import serializers

from wallets.models import Transaction
from wallets.services.transaction import SORT_FIELDS


class TransactionSerializer(serializers.ModelSerializer):
    """Read-only serializer for ledger rows."""

    wallet_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Transaction
        fields = (
            "id",
            "wallet_id",
            "user_id",
            "transaction_type",
            "amount",
            "balance_before",
            "balance_after",
            "status",
            "description",
            "reference_id",
            "reference_type",
            "metadata",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class AdminTransactionSerializer(TransactionSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + (
            "user_email",
            "ip_address",
            "user_agent",
            "idempotency_key",
        )
        read_only_fields = fields


class TransactionQuerySerializer(serializers.Serializer):
    """Query-string filters shared by every ledger listing."""

    type = serializers.ChoiceField(choices=Transaction.TransactionType.choices, required=False)
    status = serializers.ChoiceField(choices=Transaction.Status.choices, required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    min_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False
    )
    max_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False
    )
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    sort_by = serializers.ChoiceField(choices=list(SORT_FIELDS), default="created_at")
    sort_order = serializers.ChoiceField(choices=["asc", "desc", "ASC", "DESC"], default="desc")

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        low, high = attrs.get("min_amount"), attrs.get("max_amount")
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError(
                {"max_amount": "Maximum amount must be greater than minimum amount."}
            )
        return attrs


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    type = serializers.ChoiceField(choices=Transaction.TransactionType.choices, required=False)

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        return attrs


class CreateTransactionSerializer(serializers.Serializer):
    """Admin-authored ledger row."""

    wallet_id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=Transaction.TransactionType.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    description = serializers.CharField(max_length=500)
    status = serializers.ChoiceField(
        choices=Transaction.Status.choices, default=Transaction.Status.COMPLETED
    )
    reference_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    reference_type = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    metadata = serializers.JSONField(required=False, allow_null=True, default=None)
