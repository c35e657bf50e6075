import logging

from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from catalog.serializers import ProductQuerySerializer, ProductSerializer, StockUpdateSerializer
from catalog.services import ProductService

logger = logging.getLogger(__name__)


class ProductListCreateView(ListAPIView):
    """
    GET /api/products/ — Active products (public).

    Query params: page, limit, search, min_price, max_price,
    sort_by (created_at, price, name, stock), order (asc, desc)

    POST /api/products/ — Create a product (admin only).
    """

    serializer_class = ProductSerializer
    throttle_scope = "admin_write"

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [AllowAny()]

    def get_throttles(self):
        if self.request.method == "POST":
            return super().get_throttles()
        return []

    def get_queryset(self):
        serializer = ProductQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return ProductService.list_products(**serializer.validated_data)

    def post(self, request, *args, **kwargs):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = ProductService.create_product(**serializer.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class ProductSearchView(APIView):
    """GET /api/products/search?q=<text> — Up to 20 active matches."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        products = ProductService.search(request.query_params.get("q", "").strip())
        return Response(ProductSerializer(products, many=True).data)


class TopSellingProductsView(APIView):
    """GET /api/products/top-selling?limit=10"""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        try:
            limit = min(max(int(request.query_params.get("limit", 10)), 1), 100)
        except ValueError:
            limit = 10
        return Response(ProductService.top_selling(limit))


class LowStockProductsView(APIView):
    """GET /api/products/low-stock?threshold=10 (admin only)"""

    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        threshold = request.query_params.get("threshold")
        try:
            threshold = int(threshold) if threshold is not None else None
        except ValueError:
            threshold = None
        products = ProductService.low_stock(threshold)
        return Response(ProductSerializer(products, many=True).data)


class ProductDetailView(APIView):
    """
    GET /api/products/<id> — Public; admins also see inactive products.
    PUT|PATCH /api/products/<id> — Admin only.
    DELETE /api/products/<id> — Admin only, soft delete.
    """

    throttle_scope = "admin_write"

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAdminRole()]

    def get_throttles(self):
        if self.request.method == "GET":
            return []
        return super().get_throttles()

    def get(self, request, pk, *args, **kwargs):
        include_inactive = bool(request.user and request.user.is_authenticated and request.user.is_admin)
        product = ProductService.get_product(pk, include_inactive=include_inactive)
        return Response(ProductSerializer(product).data)

    def put(self, request, pk, *args, **kwargs):
        serializer = ProductSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        product = ProductService.update_product(pk, **serializer.validated_data)
        return Response(ProductSerializer(product).data)

    patch = put

    def delete(self, request, pk, *args, **kwargs):
        ProductService.remove_product(pk)
        return Response({"message": "Product deleted successfully"})


class ProductStockView(APIView):
    """PATCH /api/products/<id>/stock — Set the absolute stock level (admin only)."""

    permission_classes = [IsAdminRole]
    throttle_scope = "admin_write"

    def patch(self, request, pk, *args, **kwargs):
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = ProductService.update_stock(pk, serializer.validated_data["quantity"])
        return Response(ProductSerializer(product).data)


