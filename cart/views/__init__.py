from cart.views.cart import (
    CartItemDetailView,
    CartItemsView,
    CartTotalView,
    CartView,
    GuestCartItemsView,
    GuestCartView,
    MergeCartView,
    ValidateCartView,
)

__all__ = [
    "CartView",
    "CartTotalView",
    "CartItemsView",
    "CartItemDetailView",
    "ValidateCartView",
    "MergeCartView",
    "GuestCartView",
    "GuestCartItemsView",
]
