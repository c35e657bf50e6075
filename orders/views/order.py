import logging

from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from orders.serializers import (
    AdminOrderSerializer,
    CancelOrderSerializer,
    CheckoutSerializer,
    CreateOrderSerializer,
    OrderQuerySerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from orders.services import OrderService

logger = logging.getLogger(__name__)


class OrderListCreateView(ListAPIView):
    """
    GET /api/orders/ — The caller's orders.

    Query params: page, limit, status, search, sort_by, sort_order

    POST /api/orders/ — Place an order for explicit items (pending, unpaid).
    """

    serializer_class = OrderSerializer
    throttle_scope = "orders"

    def get_throttles(self):
        if self.request.method == "POST":
            return super().get_throttles()
        return []

    def get_queryset(self):
        serializer = OrderQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return OrderService.list_my_orders(self.request.user, **serializer.validated_data)

    def post(self, request, *args, **kwargs):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        items = data.pop("items")
        order = OrderService.create_order(request.user, items, **data)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class CheckoutView(APIView):
    """
    POST /api/orders/checkout — Pay for the cart from the wallet.

    Request body: shipping_address, shipping_city, shipping_zip_code,
    shipping_country, and optionally shipping_state, phone_number, notes.
    """

    throttle_scope = "checkout"

    def post(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.checkout(request.user, **serializer.validated_data)
        return Response(
            {"message": "Order placed successfully", "order": OrderSerializer(order).data},
            status=status.HTTP_201_CREATED,
        )


class AdminOrderListView(ListAPIView):
    """GET /api/orders/admin/all — Every order; search also matches the customer email."""

    serializer_class = AdminOrderSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        serializer = OrderQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return OrderService.list_orders(**serializer.validated_data)


class OrderStatsView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        stats = OrderService.stats()
        stats["recent_orders"] = AdminOrderSerializer(stats["recent_orders"], many=True).data
        return Response(stats)


class OrderDetailView(APIView):
    """GET /api/orders/<id> — Owner or staff."""

    def get(self, request, pk, *args, **kwargs):
        order = OrderService.get_order(pk, request.user)
        serializer_class = AdminOrderSerializer if request.user.is_staff else OrderSerializer
        return Response(serializer_class(order).data)


class CancelOrderView(APIView):
    """PATCH /api/orders/<id>/cancel — Owner only, while pending or processing."""

    throttle_scope = "orders"

    def patch(self, request, pk, *args, **kwargs):
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.cancel(pk, request.user, serializer.validated_data["reason"])
        return Response({"message": "Order cancelled successfully", "order": OrderSerializer(order).data})


class UpdateOrderStatusView(APIView):
    """
    PATCH /api/orders/<id>/status — Admin status change.

    Request body: {"status": "...", "tracking_number": "...", "notes": "..."}
    """

    permission_classes = [IsAdminRole]
    throttle_scope = "admin_write"

    def patch(self, request, pk, *args, **kwargs):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService.update_status(pk, **serializer.validated_data)
        return Response(AdminOrderSerializer(order).data)
