from catalog.views.product import (
    LowStockProductsView,
    ProductDetailView,
    ProductListCreateView,
    ProductSearchView,
    ProductStockView,
    TopSellingProductsView,
)
from catalog.views.review import (
    CanReviewView,
    MyReviewsView,
    ProductRatingView,
    ProductReviewsView,
    ReviewDetailView,
)

__all__ = [
    "ProductListCreateView",
    "ProductSearchView",
    "TopSellingProductsView",
    "LowStockProductsView",
    "ProductDetailView",
    "ProductStockView",
    "ProductReviewsView",
    "ProductRatingView",
    "CanReviewView",
    "MyReviewsView",
    "ReviewDetailView",
]
