from orders.services.pricing import price_breakdown
from orders.services.order import OrderService

__all__ = ["OrderService", "price_breakdown"]
