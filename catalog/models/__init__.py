from catalog.models.product import Product
from catalog.models.review import Review

__all__ = ["Product", "Review"]
