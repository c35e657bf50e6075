from catalog.serializers.product import (
    ProductQuerySerializer,
    ProductSerializer,
    StockUpdateSerializer,
)
from catalog.serializers.review import (
    CreateReviewSerializer,
    ReviewQuerySerializer,
    ReviewSerializer,
    UpdateReviewSerializer,
)

__all__ = [
    "ProductSerializer",
    "ProductQuerySerializer",
    "StockUpdateSerializer",
    "ReviewSerializer",
    "CreateReviewSerializer",
    "UpdateReviewSerializer",
    "ReviewQuerySerializer",
]
