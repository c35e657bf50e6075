from django.urls import path

from orders.views import (
    AdminOrderListView,
    CancelOrderView,
    CheckoutView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatsView,
    UpdateOrderStatusView,
)

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="order-list"),
    path("checkout", CheckoutView.as_view(), name="order-checkout"),
    path("admin/all", AdminOrderListView.as_view(), name="order-admin-list"),
    path("admin/stats", OrderStatsView.as_view(), name="order-stats"),
    path("<uuid:pk>", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:pk>/cancel", CancelOrderView.as_view(), name="order-cancel"),
    path("<uuid:pk>/status", UpdateOrderStatusView.as_view(), name="order-status"),
]
