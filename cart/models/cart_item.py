from django.conf import settings
from django.db import models

from catalog.models import Product
from common.models import BaseModel


class CartItem(BaseModel):
    """
    One product line in a cart. The cart belongs either to a user or to an
    anonymous guest identified by ``guest_id``, never both.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="cart_items",
    )
    guest_id = models.UUIDField(null=True, blank=True, db_index=True)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(check=models.Q(quantity__gte=1), name="cart_item_quantity_positive"),
            models.CheckConstraint(
                check=(
                    models.Q(user__isnull=False, guest_id__isnull=True)
                    | models.Q(user__isnull=True, guest_id__isnull=False)
                ),
                name="cart_item_single_owner",
            ),
            models.UniqueConstraint(
                fields=["user", "product"],
                condition=models.Q(user__isnull=False),
                name="cart_item_unique_user_product",
            ),
            models.UniqueConstraint(
                fields=["guest_id", "product"],
                condition=models.Q(guest_id__isnull=False),
                name="cart_item_unique_guest_product",
            ),
        ]

    def __str__(self):
        owner = self.user_id or f"guest:{self.guest_id}"
        return f"CartItem {self.product_id} x{self.quantity} ({owner})"

    @property
    def line_total(self):
        return self.product.price * self.quantity

