from decimal import Decimal

from django.db import models

from common.models import BaseModel


class Product(BaseModel):
    """
    A sellable item. Stock is the live quantity on hand and is only changed
    inside locked order/checkout transactions or by an admin stock update.
    """

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)
    image_url = models.URLField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta(BaseModel.Meta):
        constraints = [
            models.CheckConstraint(check=models.Q(stock__gte=0), name="product_stock_non_negative"),
            models.CheckConstraint(
                check=models.Q(price__gte=Decimal("0.01")), name="product_price_positive"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.price})"

    @classmethod
    def active(cls):
        return cls.objects.filter(is_active=True)

    @classmethod
    def low_stock(cls, threshold):
        return cls.active().filter(stock__lte=threshold).order_by("stock")
