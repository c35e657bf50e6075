from django.urls import path

from catalog.views import (
    CanReviewView,
    LowStockProductsView,
    ProductDetailView,
    ProductListCreateView,
    ProductRatingView,
    ProductReviewsView,
    ProductSearchView,
    ProductStockView,
    TopSellingProductsView,
)

urlpatterns = [
    path("", ProductListCreateView.as_view(), name="product-list"),
    path("search", ProductSearchView.as_view(), name="product-search"),
    path("top-selling", TopSellingProductsView.as_view(), name="product-top-selling"),
    path("low-stock", LowStockProductsView.as_view(), name="product-low-stock"),
    path("<uuid:pk>", ProductDetailView.as_view(), name="product-detail"),
    path("<uuid:pk>/stock", ProductStockView.as_view(), name="product-stock"),
    path("<uuid:pk>/reviews", ProductReviewsView.as_view(), name="product-reviews"),
    path("<uuid:pk>/rating", ProductRatingView.as_view(), name="product-rating"),
    path("<uuid:pk>/can-review", CanReviewView.as_view(), name="product-can-review"),
]
