from orders.views.order import (
    AdminOrderListView,
    CancelOrderView,
    CheckoutView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatsView,
    UpdateOrderStatusView,
)

__all__ = [
    "AdminOrderListView",
    "CancelOrderView",
    "CheckoutView",
    "OrderDetailView",
    "OrderListCreateView",
    "OrderStatsView",
    "UpdateOrderStatusView",
]
