from orders.serializers.order import (
    AdminOrderSerializer,
    CancelOrderSerializer,
    CheckoutSerializer,
    CreateOrderSerializer,
    OrderItemSerializer,
    OrderQuerySerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)

__all__ = [
    "AdminOrderSerializer",
    "CancelOrderSerializer",
    "CheckoutSerializer",
    "CreateOrderSerializer",
    "OrderItemSerializer",
    "OrderQuerySerializer",
    "OrderSerializer",
    "UpdateOrderStatusSerializer",
]
