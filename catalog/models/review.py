from django.conf import settings
from django.db import models

from catalog.models.product import Product
from common.models import BaseModel


class Review(BaseModel):
    """One review per user and product, rated 1 to 5."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(default=5)
    comment = models.TextField(blank=True, default="")

    class Meta(BaseModel.Meta):
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="review_unique_user_product"),
            models.CheckConstraint(
                check=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name="review_rating_range",
            ),
        ]

    def __str__(self):
        return f"Review {self.id} | {self.product_id} | {self.rating}"
