import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction

from cart.models import CartItem
from catalog.models import Product
from common.exceptions import InvalidOperation, NotFound
from common.utils import to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartOwner:
    """A signed-in user's cart or an anonymous guest cart."""

    user: Optional[object] = None
    guest_id: Optional[UUID] = None

    @classmethod
    def for_user(cls, user):
        return cls(user=user)

    @classmethod
    def for_guest(cls, guest_id):
        return cls(guest_id=guest_id)

    def lookup(self) -> dict:
        if self.user is not None:
            return {"user": self.user}
        return {"guest_id": self.guest_id}

    def __str__(self):
        return f"user:{self.user.pk}" if self.user is not None else f"guest:{self.guest_id}"


class CartService:
    """
    Cart lines are bounded by live product stock; every write re-checks the
    requested quantity against the current stock value.
    """

    @staticmethod
    def items(owner: CartOwner):
        return CartItem.objects.filter(**owner.lookup()).select_related("product").order_by("created_at")

    @staticmethod
    def get_cart(owner: CartOwner) -> dict:
        items = list(CartService.items(owner))
        return {
            "items": items,
            "item_count": sum(item.quantity for item in items),
            "total": to_money(sum((item.line_total for item in items), 0)),
        }

    @staticmethod
    def get_total(owner: CartOwner) -> dict:
        cart = CartService.get_cart(owner)
        return {"total": cart["total"], "item_count": cart["item_count"]}

    @staticmethod
    @transaction.atomic
    def add_item(owner: CartOwner, product_id, quantity=1) -> CartItem:
        if quantity < 1:
            raise InvalidOperation("Quantity must be at least 1")

        product = Product.active().filter(id=product_id).first()
        if product is None:
            raise NotFound("Product not found or unavailable")

        item = (
            CartItem.objects.select_for_update()
            .filter(product=product, **owner.lookup())
            .first()
        )
        new_quantity = quantity + (item.quantity if item else 0)
        if new_quantity > product.stock:
            raise InvalidOperation(
                f"Insufficient stock for {product.name}. Available: {product.stock}, Requested: {new_quantity}"
            )

        if item:
            item.quantity = new_quantity
            item.save(update_fields=["quantity", "updated_at"])
        else:
            item = CartItem.objects.create(product=product, quantity=quantity, **owner.lookup())

        logger.info("Cart %s: product=%s quantity=%d", owner, product.id, new_quantity)
        return item

    @staticmethod
    def _owned_item(owner: CartOwner, item_id) -> CartItem:
        item = (
            CartItem.objects.select_related("product")
            .filter(id=item_id, **owner.lookup())
            .first()
        )
        if item is None:
            raise NotFound("Cart item not found")
        return item

    @staticmethod
    @transaction.atomic
    def update_quantity(owner: CartOwner, item_id, quantity) -> CartItem:
        if quantity < 1:
            raise InvalidOperation("Quantity must be at least 1")

        item = CartService._owned_item(owner, item_id)
        if quantity > item.product.stock:
            raise InvalidOperation(
                f"Insufficient stock for {item.product.name}. Available: {item.product.stock}"
            )

        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        return item

    @staticmethod
    def remove_item(owner: CartOwner, item_id) -> None:
        CartService._owned_item(owner, item_id).delete()

    @staticmethod
    def clear(owner: CartOwner) -> int:
        count, _ = CartItem.objects.filter(**owner.lookup()).delete()
        logger.info("Cart %s cleared (%d line(s))", owner, count)
        return count

    @staticmethod
    def validate(owner: CartOwner) -> dict:
        """Report lines that cannot be bought as they stand."""
        issues = []
        for item in CartService.items(owner):
            product = item.product
            if not product.is_active:
                issues.append(
                    {
                        "item_id": item.id,
                        "product_id": product.id,
                        "issue": "inactive",
                        "message": f"{product.name} is no longer available",
                    }
                )
            elif item.quantity > product.stock:
                issues.append(
                    {
                        "item_id": item.id,
                        "product_id": product.id,
                        "issue": "insufficient_stock",
                        "message": f"Only {product.stock} of {product.name} in stock",
                        "available": product.stock,
                        "requested": item.quantity,
                    }
                )

        cart = CartService.get_cart(owner)
        return {
            "is_valid": bool(cart["items"]) and not issues,
            "issues": issues,
            "item_count": cart["item_count"],
            "total": cart["total"],
        }

    @staticmethod
    @transaction.atomic
    def merge_guest_cart(guest_id, user) -> dict:
        """
        Move a guest cart into the user's cart. Quantities for products in
        both carts are summed and capped at the current stock.
        """
        guest_items = list(
            CartItem.objects.select_for_update()
            .select_related("product")
            .filter(guest_id=guest_id)
        )
        merged = 0
        for guest_item in guest_items:
            product = guest_item.product
            if not product.is_active or product.stock < 1:
                continue

            item = CartItem.objects.select_for_update().filter(user=user, product=product).first()
            if item:
                item.quantity = min(item.quantity + guest_item.quantity, product.stock)
                item.save(update_fields=["quantity", "updated_at"])
            else:
                CartItem.objects.create(
                    user=user, product=product, quantity=min(guest_item.quantity, product.stock)
                )
            merged += 1

        CartItem.objects.filter(guest_id=guest_id).delete()
        logger.info("Merged guest cart %s into user %s (%d line(s))", guest_id, user.pk, merged)
        return CartService.get_cart(CartOwner.for_user(user))
