from cart.serializers.cart import (
    AddCartItemSerializer,
    CartItemSerializer,
    CartSerializer,
    MergeCartSerializer,
    UpdateCartItemSerializer,
)

__all__ = [
    "CartItemSerializer",
    "CartSerializer",
    "AddCartItemSerializer",
    "UpdateCartItemSerializer",
    "MergeCartSerializer",
]
