import uuid
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from cart.models import CartItem
from cart.services import CartOwner, CartService
from catalog.models import Product
from common.exceptions import InvalidOperation, NotFound


def make_user(email="user@example.com"):
    return User.objects.create_user(
        email=email, password="Str0ng!Pass", first_name="Jane", last_name="Doe", is_email_verified=True
    )


def make_product(name="Keyboard", price="49.99", stock=5, **extra):
    return Product.objects.create(
        name=name, description=name, price=Decimal(price), stock=stock, **extra
    )


# ============================================================
# Model Tests
# ============================================================


class CartItemModelTest(TestCase):
    def test_line_total(self):
        item = CartItem(product=make_product(price="10.25"), quantity=3, user=make_user())
        self.assertEqual(item.line_total, Decimal("30.75"))

    def test_owner_is_user_or_guest_not_both(self):
        user = make_user()
        product = make_product()
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CartItem.objects.create(user=user, guest_id=uuid.uuid4(), product=product)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CartItem.objects.create(product=product)

    def test_one_line_per_product(self):
        user = make_user()
        product = make_product()
        CartItem.objects.create(user=user, product=product)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CartItem.objects.create(user=user, product=product)


# ============================================================
# Service Tests
# ============================================================


class CartServiceTest(TestCase):
    def setUp(self):
        self.user = make_user()
        self.owner = CartOwner.for_user(self.user)
        self.keyboard = make_product(stock=5)
        self.mouse = make_product("Mouse", price="20.00", stock=10)

    def test_add_item_merges_lines(self):
        CartService.add_item(self.owner, self.keyboard.id, 2)
        item = CartService.add_item(self.owner, self.keyboard.id, 1)

        self.assertEqual(item.quantity, 3)
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 1)

    def test_add_item_over_stock(self):
        CartService.add_item(self.owner, self.keyboard.id, 4)
        with self.assertRaises(InvalidOperation):
            CartService.add_item(self.owner, self.keyboard.id, 2)
        self.assertEqual(CartItem.objects.get(user=self.user).quantity, 4)

    def test_add_inactive_product(self):
        retired = make_product("Retired", is_active=False)
        with self.assertRaises(NotFound):
            CartService.add_item(self.owner, retired.id, 1)

    def test_get_cart_totals(self):
        CartService.add_item(self.owner, self.keyboard.id, 2)
        CartService.add_item(self.owner, self.mouse.id, 1)

        cart = CartService.get_cart(self.owner)
        self.assertEqual(cart["item_count"], 3)
        self.assertEqual(cart["total"], Decimal("119.98"))

    def test_update_quantity_checks_stock_and_owner(self):
        item = CartService.add_item(self.owner, self.keyboard.id, 1)

        self.assertEqual(CartService.update_quantity(self.owner, item.id, 5).quantity, 5)
        with self.assertRaises(InvalidOperation):
            CartService.update_quantity(self.owner, item.id, 6)
        with self.assertRaises(NotFound):
            CartService.update_quantity(CartOwner.for_user(make_user("other@example.com")), item.id, 1)

    def test_remove_and_clear(self):
        item = CartService.add_item(self.owner, self.keyboard.id, 1)
        CartService.add_item(self.owner, self.mouse.id, 1)

        CartService.remove_item(self.owner, item.id)
        self.assertEqual(CartService.clear(self.owner), 1)
        self.assertEqual(CartService.get_cart(self.owner)["item_count"], 0)

    def test_validate_reports_issues(self):
        CartService.add_item(self.owner, self.keyboard.id, 4)
        CartService.add_item(self.owner, self.mouse.id, 1)
        Product.objects.filter(id=self.keyboard.id).update(stock=2)
        Product.objects.filter(id=self.mouse.id).update(is_active=False)

        result = CartService.validate(self.owner)

        self.assertFalse(result["is_valid"])
        self.assertEqual(
            sorted(issue["issue"] for issue in result["issues"]), ["inactive", "insufficient_stock"]
        )

    def test_validate_empty_cart_is_not_valid(self):
        self.assertFalse(CartService.validate(self.owner)["is_valid"])

    def test_merge_guest_cart_caps_at_stock(self):
        guest = CartOwner.for_guest(uuid.uuid4())
        CartService.add_item(guest, self.keyboard.id, 3)
        CartService.add_item(guest, self.mouse.id, 2)
        CartService.add_item(self.owner, self.keyboard.id, 4)

        cart = CartService.merge_guest_cart(guest.guest_id, self.user)

        quantities = {item.product_id: item.quantity for item in cart["items"]}
        self.assertEqual(quantities, {self.keyboard.id: 5, self.mouse.id: 2})
        self.assertFalse(CartItem.objects.filter(guest_id=guest.guest_id).exists())


# ============================================================
# API Tests
# ============================================================


class CartAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.product = make_product(stock=5)
        self.client.force_authenticate(user=self.user)

    def test_cart_requires_authentication(self):
        response = APIClient().get("/api/cart/")
        self.assertEqual(response.status_code, 401)

    def test_add_and_get_cart(self):
        response = self.client.post(
            "/api/cart/items", {"product_id": str(self.product.id), "quantity": 2}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["item"]["quantity"], 2)
        self.assertEqual(response.data["cart"]["total"], "99.98")

        response = self.client.get("/api/cart/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["item_count"], 2)
        self.assertEqual(response.data["items"][0]["product"]["name"], "Keyboard")

    def test_add_over_stock(self):
        response = self.client.post(
            "/api/cart/items", {"product_id": str(self.product.id), "quantity": 6}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Insufficient stock", response.data["error"])

    def test_add_invalid_quantity(self):
        response = self.client.post(
            "/api/cart/items", {"product_id": str(self.product.id), "quantity": 0}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_update_and_remove_item(self):
        item = CartService.add_item(CartOwner.for_user(self.user), self.product.id, 1)

        response = self.client.patch(f"/api/cart/items/{item.id}", {"quantity": 3}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["quantity"], 3)

        response = self.client.delete(f"/api/cart/items/{item.id}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(CartItem.objects.filter(id=item.id).exists())

    def test_total_and_clear(self):
        CartService.add_item(CartOwner.for_user(self.user), self.product.id, 2)

        response = self.client.get("/api/cart/total")
        self.assertEqual(response.data, {"total": "99.98", "item_count": 2})

        response = self.client.delete("/api/cart/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(CartItem.objects.count(), 0)

    def test_validate(self):
        CartService.add_item(CartOwner.for_user(self.user), self.product.id, 2)
        response = self.client.get("/api/cart/validate")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["is_valid"])

    def test_guest_cart_and_merge(self):
        guest_id = uuid.uuid4()
        guest_client = APIClient()

        response = guest_client.post(
            f"/api/cart/guest/{guest_id}/items", {"product_id": str(self.product.id)}, format="json"
        )
        self.assertEqual(response.status_code, 201)

        response = guest_client.get(f"/api/cart/guest/{guest_id}")
        self.assertEqual(response.data["item_count"], 1)

        response = self.client.post("/api/cart/merge", {"guest_id": str(guest_id)}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["item_count"], 1)
        self.assertFalse(CartItem.objects.filter(guest_id=guest_id).exists())
