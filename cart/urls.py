from django.urls import path

from cart.views import (
    CartItemDetailView,
    CartItemsView,
    CartTotalView,
    CartView,
    GuestCartItemsView,
    GuestCartView,
    MergeCartView,
    ValidateCartView,
)

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("total", CartTotalView.as_view(), name="cart-total"),
    path("items", CartItemsView.as_view(), name="cart-items"),
    path("items/<uuid:item_id>", CartItemDetailView.as_view(), name="cart-item-detail"),
    path("validate", ValidateCartView.as_view(), name="cart-validate"),
    path("merge", MergeCartView.as_view(), name="cart-merge"),
    path("guest/<uuid:guest_id>", GuestCartView.as_view(), name="cart-guest"),
    path("guest/<uuid:guest_id>/items", GuestCartItemsView.as_view(), name="cart-guest-items"),
]
