import logging
from collections import OrderedDict
from datetime import timedelta

from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from cart.models import CartItem
from catalog.models import Product
from catalog.services import ProductService
from common.exceptions import InsufficientFunds, InvalidOperation, NotFound, PermissionDenied
from common.utils import growth_percent, to_money
from orders.models import Order, OrderItem
from orders.services.pricing import price_breakdown
from wallets.models import Transaction, Wallet
from wallets.services import LedgerService

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = (
    "shipping_address",
    "shipping_city",
    "shipping_state",
    "shipping_zip_code",
    "shipping_country",
    "phone_number",
    "notes",
)
SORT_FIELDS = ("created_at", "total", "status")


def _lock_products(product_ids):
    """Lock the product rows in primary-key order and return them keyed by id."""
    products = Product.objects.select_for_update().filter(id__in=product_ids).order_by("id")
    return {product.id: product for product in products}


def _build_lines(requested, products):
    """
    Validate each (product_id, quantity) pair against the locked products.

    Returns a list of (product, quantity, line_total) tuples.
    """
    lines = []
    for product_id, quantity in requested.items():
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise NotFound(f"Product {product_id} not found or unavailable")
        if quantity > product.stock:
            raise InvalidOperation(
                f"Insufficient stock for {product.name}. Available: {product.stock}, Requested: {quantity}"
            )
        lines.append((product, quantity, to_money(product.price * quantity)))
    return lines


def _create_order(user, lines, status, shipping, **extra) -> Order:
    pricing = price_breakdown(sum((line_total for _, _, line_total in lines), 0))
    order = Order.objects.create(
        user=user,
        status=status,
        **pricing,
        **{name: shipping.get(name) or "" for name in SHIPPING_FIELDS},
        **extra,
    )
    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product=product,
                product_name=product.name,
                product_image=product.image_url,
                price=product.price,
                quantity=quantity,
                total=line_total,
            )
            for product, quantity, line_total in lines
        ]
    )
    for product, quantity, _ in lines:
        product.stock -= quantity
        product.save(update_fields=["stock", "updated_at"])
    return order


class OrderService:
    """
    Order placement, checkout and the status lifecycle.

    Checkout is all-or-nothing: products and the wallet are locked, and the
    wallet debit, stock decrement, order rows and cart clearing commit
    together or not at all.
    """

    @staticmethod
    @transaction.atomic
    def create_order(user, items, **shipping) -> Order:
        """
        Place a PENDING, unpaid order for explicit items and reserve their stock.

        Args:
            items: iterable of {"product_id": ..., "quantity": ...}
        """
        requested = OrderedDict()
        for item in items:
            requested[item["product_id"]] = requested.get(item["product_id"], 0) + item["quantity"]
        if not requested:
            raise InvalidOperation("Order must contain at least one item")

        lines = _build_lines(requested, _lock_products(requested.keys()))
        order = _create_order(
            user,
            lines,
            Order.Status.PENDING,
            shipping,
            payment_method=shipping.get("payment_method") or Order.PaymentMethod.WALLET,
        )
        logger.info("Order created: %s user=%s total=%s", order.id, user.id, order.total)
        return order

    @staticmethod
    @transaction.atomic
    def checkout(user, **shipping) -> Order:
        """
        Turn the user's cart into a paid PROCESSING order, paid from the wallet.

        Raises:
            InvalidOperation: Empty cart or not enough stock.
            InsufficientFunds: Wallet balance below the order total.
            NotFound: Missing wallet or a product that is no longer sold.
        """
        cart_items = list(CartItem.objects.filter(user=user).order_by("created_at"))
        if not cart_items:
            raise InvalidOperation("Cart is empty")

        requested = OrderedDict((item.product_id, item.quantity) for item in cart_items)
        lines = _build_lines(requested, _lock_products(requested.keys()))

        try:
            wallet = LedgerService.lock_wallet(user.id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

        total = price_breakdown(sum((line_total for _, _, line_total in lines), 0))["total"]
        if wallet.balance < total:
            raise InsufficientFunds(
                f"Insufficient wallet balance. Required: {total}, Available: {wallet.balance}"
            )

        order = _create_order(
            user,
            lines,
            Order.Status.PROCESSING,
            shipping,
            payment_method=Order.PaymentMethod.WALLET,
            is_paid=True,
            paid_at=timezone.now(),
        )
        LedgerService.post(
            wallet,
            Transaction.TransactionType.PAYMENT,
            order.total,
            f"Payment for order {order.id}",
            reference_type="order",
            reference_id=order.id,
        )
        CartItem.objects.filter(user=user).delete()

        logger.info(
            "Checkout completed: order=%s user=%s total=%s wallet_balance=%s",
            order.id,
            user.id,
            order.total,
            wallet.balance,
        )
        return order

    @staticmethod
    def get_order(order_id, user) -> Order:
        order = (
            Order.objects.select_related("user")
            .prefetch_related("items")
            .filter(id=order_id)
            .first()
        )
        if order is None or (order.user_id != user.id and not user.is_staff):
            raise NotFound(f"Order with ID {order_id} not found")
        return order

    @staticmethod
    def _filter(queryset, status=None, search=None, sort_by="created_at", sort_order="desc", search_email=False):
        if status:
            queryset = queryset.filter(status=status)
        if search:
            condition = Q(id__icontains=search) | Q(tracking_number__icontains=search)
            if search_email:
                condition |= Q(user__email__icontains=search)
            queryset = queryset.filter(condition)

        sort_field = sort_by if sort_by in SORT_FIELDS else "created_at"
        if (sort_order or "desc").lower() == "desc":
            sort_field = f"-{sort_field}"
        return queryset.order_by(sort_field)

    @staticmethod
    def list_my_orders(user, **filters):
        queryset = Order.objects.filter(user=user).prefetch_related("items")
        return OrderService._filter(queryset, **filters)

    @staticmethod
    def list_orders(**filters):
        queryset = Order.objects.select_related("user").prefetch_related("items")
        return OrderService._filter(queryset, search_email=True, **filters)

    @staticmethod
    def _cancel(order, reason) -> None:
        """Mark a locked order cancelled, put its stock back and refund what was paid."""
        order.status = Order.Status.CANCELLED
        order.cancelled_at = timezone.now()
        order.cancellation_reason = reason or ""
        order.save(update_fields=["status", "cancelled_at", "cancellation_reason", "updated_at"])

        quantities = {}
        for item in order.items.all():
            if item.product_id:
                quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
        for product_id in sorted(quantities):
            Product.objects.filter(id=product_id).update(stock=F("stock") + quantities[product_id])

        if not order.is_paid:
            return

        try:
            wallet = LedgerService.lock_wallet(order.user_id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

        refundable = to_money(order.total) - to_money(Transaction.refunded_total_for_order(order.id))
        if refundable <= 0:
            return

        LedgerService.post(
            wallet,
            Transaction.TransactionType.REFUND,
            refundable,
            f"Refund for cancelled order {order.id}",
            reference_type="order",
            reference_id=order.id,
        )
        logger.info("Refunded %s to wallet for cancelled order %s", refundable, order.id)

    @staticmethod
    @transaction.atomic
    def cancel(order_id, user, reason="") -> Order:
        order = Order.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            raise NotFound(f"Order with ID {order_id} not found")
        if order.user_id != user.id:
            raise PermissionDenied("You can only cancel your own orders")
        if order.status not in Order.CANCELLABLE_STATUSES:
            raise InvalidOperation(f"Cannot cancel order with status {order.status}")

        OrderService._cancel(order, reason)
        logger.info("Order %s cancelled by user %s", order.id, user.id)
        return order

    @staticmethod
    @transaction.atomic
    def update_status(order_id, status, tracking_number=None, notes=None) -> Order:
        order = Order.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            raise NotFound(f"Order with ID {order_id} not found")
        if not order.can_transition_to(status):
            raise InvalidOperation(f"Cannot transition from {order.status} to {status}")

        if tracking_number:
            order.tracking_number = tracking_number
        if notes:
            order.notes = notes

        if status == Order.Status.CANCELLED:
            order.save(update_fields=["tracking_number", "notes", "updated_at"])
            OrderService._cancel(order, notes or "Cancelled by admin")
        else:
            order.status = status
            now = timezone.now()
            if status == Order.Status.SHIPPED:
                order.shipped_at = now
            elif status == Order.Status.DELIVERED:
                order.delivered_at = now
            order.save()

        logger.info("Order %s status updated to %s", order.id, status)
        return order

    @staticmethod
    def stats() -> dict:
        now = timezone.localtime()
        start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        start_of_last_month = (start_of_month - timedelta(days=1)).replace(day=1)

        paid = Order.objects.filter(is_paid=True)
        revenue_this_month = to_money(
            paid.filter(created_at__gte=start_of_month).aggregate(total=Sum("total"))["total"] or 0
        )
        revenue_last_month = to_money(
            paid.filter(created_at__gte=start_of_last_month, created_at__lt=start_of_month)
            .aggregate(total=Sum("total"))["total"]
            or 0
        )

        by_status = {status: 0 for status in Order.Status.values}
        for row in Order.objects.order_by().values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]

        return {
            "total_orders": Order.objects.count(),
            "orders_by_status": by_status,
            "revenue": {
                "this_month": revenue_this_month,
                "last_month": revenue_last_month,
                "growth": growth_percent(revenue_this_month, revenue_last_month),
            },
            "orders": {
                "this_month": Order.objects.filter(created_at__gte=start_of_month).count(),
            },
            "top_products": ProductService.top_selling(10),
            "recent_orders": list(
                Order.objects.select_related("user").prefetch_related("items").order_by("-created_at")[:10]
            ),
        }
