import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q, Sum

from catalog.models import Product
from common.exceptions import InvalidOperation, NotFound
from common.utils import to_money
from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = getattr(settings, "PRODUCT_LOW_STOCK_THRESHOLD", 10)

SORT_FIELDS = ("created_at", "price", "name", "stock")
EDITABLE_FIELDS = ("name", "description", "price", "stock", "image_url", "is_active")


class ProductService:
    @staticmethod
    def list_products(search=None, min_price=None, max_price=None, sort_by="created_at", order="desc"):
        """Active products, filtered and sorted. Pagination is left to the view."""
        queryset = Product.active()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if min_price is not None:
            queryset = queryset.filter(price__gte=min_price)
        if max_price is not None:
            queryset = queryset.filter(price__lte=max_price)

        sort_field = sort_by if sort_by in SORT_FIELDS else "created_at"
        if (order or "desc").lower() == "desc":
            sort_field = f"-{sort_field}"
        return queryset.order_by(sort_field, "id")

    @staticmethod
    def search(query, limit=20):
        if not query:
            return []
        return list(
            Product.active()
            .filter(Q(name__icontains=query) | Q(description__icontains=query))
            .order_by("name")[:limit]
        )

    @staticmethod
    def get_product(product_id, include_inactive=False) -> Product:
        queryset = Product.objects.all() if include_inactive else Product.active()
        product = queryset.filter(id=product_id).first()
        if product is None:
            raise NotFound(f"Product with ID {product_id} not found")
        return product

    @staticmethod
    def top_selling(limit=10):
        """Best sellers by quantity over order items of non-cancelled orders."""
        rows = (
            OrderItem.objects.filter(product__isnull=False)
            .exclude(order__status=Order.Status.CANCELLED)
            .values("product_id", "product__name", "product__price", "product__image_url")
            .annotate(total_sold=Sum("quantity"), revenue=Sum("total"))
            .order_by("-total_sold", "product__name")[:limit]
        )
        return [
            {
                "product_id": row["product_id"],
                "name": row["product__name"],
                "price": to_money(row["product__price"]),
                "image_url": row["product__image_url"],
                "total_sold": row["total_sold"],
                "revenue": to_money(row["revenue"] or 0),
            }
            for row in rows
        ]

    @staticmethod
    def create_product(**data) -> Product:
        product = Product.objects.create(**{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        logger.info("Product created: %s (%s)", product.id, product.name)
        return product

    @staticmethod
    def update_product(product_id, **changes) -> Product:
        product = ProductService.get_product(product_id, include_inactive=True)
        fields = [name for name in EDITABLE_FIELDS if name in changes]
        for name in fields:
            setattr(product, name, changes[name])
        if fields:
            product.save(update_fields=[*fields, "updated_at"])
            logger.info("Product updated: %s fields=%s", product.id, ",".join(fields))
        return product

    @staticmethod
    def remove_product(product_id) -> Product:
        """Soft delete: the product disappears from the catalog but order history keeps it."""
        product = ProductService.get_product(product_id, include_inactive=True)
        product.is_active = False
        product.save(update_fields=["is_active", "updated_at"])
        logger.info("Product deactivated: %s", product.id)
        return product

    @staticmethod
    def low_stock(threshold=None):
        return list(Product.low_stock(LOW_STOCK_THRESHOLD if threshold is None else threshold))

    @staticmethod
    @transaction.atomic
    def update_stock(product_id, quantity) -> Product:
        """Set the absolute stock level."""
        if quantity is None or int(quantity) < 0:
            raise InvalidOperation("Stock cannot be negative")

        product = Product.objects.select_for_update().filter(id=product_id).first()
        if product is None:
            raise NotFound(f"Product with ID {product_id} not found")

        previous = product.stock
        product.stock = int(quantity)
        product.save(update_fields=["stock", "updated_at"])
        logger.info("Stock updated: product=%s %d->%d", product.id, previous, product.stock)
        return product
