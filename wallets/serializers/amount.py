from decimal import Decimal

from rest_framework import serializers


class AmountSerializer(serializers.Serializer):
    """Validates deposit and withdrawal requests."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class TransferSerializer(serializers.Serializer):
    to_user_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))

    def validate_to_user_id(self, value):
        request = self.context.get("request")
        if request is not None and str(request.user.id) == str(value):
            raise serializers.ValidationError("Cannot transfer to the same wallet.")
        return value


class RefundSerializer(serializers.Serializer):
    """Validates admin refund requests against a user's order."""

    user_id = serializers.UUIDField()
    order_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
