from catalog.services.product import ProductService
from catalog.services.review import ReviewService

__all__ = ["ProductService", "ReviewService"]
