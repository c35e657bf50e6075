from rest_framework import serializers

from orders.models import Order, OrderItem
from orders.services.order import SORT_FIELDS


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ("id", "product_id", "product_name", "product_image", "price", "quantity", "total")
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = (
            "id",
            "user_id",
            "items",
            "subtotal",
            "tax",
            "shipping_fee",
            "total",
            "status",
            "payment_method",
            "is_paid",
            "paid_at",
            "shipping_address",
            "shipping_city",
            "shipping_state",
            "shipping_zip_code",
            "shipping_country",
            "phone_number",
            "tracking_number",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
            "cancellation_reason",
            "notes",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ("user_email",)
        read_only_fields = fields


class ShippingSerializer(serializers.Serializer):
    shipping_address = serializers.CharField(max_length=255)
    shipping_city = serializers.CharField(max_length=100)
    shipping_state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    shipping_zip_code = serializers.CharField(max_length=20)
    shipping_country = serializers.CharField(max_length=100)
    phone_number = serializers.RegexField(
        r"^\+?[0-9]{7,15}$",
        max_length=16,
        required=False,
        allow_blank=True,
        error_messages={"invalid": "Enter a valid phone number."},
    )
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class CreateOrderItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=1000)


class CreateOrderSerializer(ShippingSerializer):
    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(
        choices=Order.PaymentMethod.choices, default=Order.PaymentMethod.WALLET
    )


class CheckoutSerializer(ShippingSerializer):
    pass


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class OrderQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices, required=False)
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    sort_by = serializers.ChoiceField(choices=SORT_FIELDS, default="created_at")
    sort_order = serializers.ChoiceField(choices=["asc", "desc", "ASC", "DESC"], default="desc")
