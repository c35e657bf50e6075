import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.serializers import (
    AddCartItemSerializer,
    CartItemSerializer,
    CartSerializer,
    MergeCartSerializer,
    UpdateCartItemSerializer,
)
from cart.services import CartOwner, CartService

logger = logging.getLogger(__name__)


class CartView(APIView):
    """
    GET /api/cart/ — The caller's cart with line totals.
    DELETE /api/cart/ — Empty the cart.
    """

    def get(self, request, *args, **kwargs):
        cart = CartService.get_cart(CartOwner.for_user(request.user))
        return Response(CartSerializer(cart).data)

    def delete(self, request, *args, **kwargs):
        CartService.clear(CartOwner.for_user(request.user))
        return Response({"message": "Cart cleared successfully"})


class CartTotalView(APIView):
    """GET /api/cart/total"""

    def get(self, request, *args, **kwargs):
        totals = CartService.get_total(CartOwner.for_user(request.user))
        return Response({"total": str(totals["total"]), "item_count": totals["item_count"]})


class CartItemsView(APIView):
    """
    POST /api/cart/items — Add a product, merging with an existing line.

    Request body: {"product_id": "<uuid>", "quantity": <int, default 1>}
    """

    def get_owner(self, request, **kwargs):
        return CartOwner.for_user(request.user)

    def post(self, request, *args, **kwargs):
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        owner = self.get_owner(request, **kwargs)
        item = CartService.add_item(
            owner,
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
        )
        return Response(
            {
                "item": CartItemSerializer(item).data,
                "cart": CartSerializer(CartService.get_cart(owner)).data,
            },
            status=status.HTTP_201_CREATED,
        )


class CartItemDetailView(APIView):
    """PATCH|DELETE /api/cart/items/<item_id>"""

    def patch(self, request, item_id, *args, **kwargs):
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = CartService.update_quantity(
            CartOwner.for_user(request.user), item_id, serializer.validated_data["quantity"]
        )
        return Response(CartItemSerializer(item).data)

    def delete(self, request, item_id, *args, **kwargs):
        CartService.remove_item(CartOwner.for_user(request.user), item_id)
        return Response({"message": "Item removed from cart"})


class ValidateCartView(APIView):
    """GET /api/cart/validate — Per-line stock and availability issues."""

    def get(self, request, *args, **kwargs):
        return Response(CartService.validate(CartOwner.for_user(request.user)))


class MergeCartView(APIView):
    """POST /api/cart/merge — Fold a guest cart into the caller's cart after login."""

    def post(self, request, *args, **kwargs):
        serializer = MergeCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = CartService.merge_guest_cart(serializer.validated_data["guest_id"], request.user)
        return Response(CartSerializer(cart).data)


class GuestCartView(APIView):
    """GET /api/cart/guest/<guest_id> — Anonymous cart."""

    permission_classes = [AllowAny]

    def get(self, request, guest_id, *args, **kwargs):
        cart = CartService.get_cart(CartOwner.for_guest(guest_id))
        return Response(CartSerializer(cart).data)


class GuestCartItemsView(CartItemsView):
    """POST /api/cart/guest/<guest_id>/items"""

    permission_classes = [AllowAny]

    def get_owner(self, request, **kwargs):
        return CartOwner.for_guest(kwargs["guest_id"])
