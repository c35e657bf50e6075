import uuid
from decimal import Decimal

from django.test import TestCase, TransactionTestCase
from rest_framework.test import APIClient

from accounts.models import User
from cart.models import CartItem
from catalog.models import Product
from common.exceptions import InsufficientFunds, InvalidOperation, NotFound, PermissionDenied
from orders.models import Order
from orders.services import OrderService, price_breakdown
from wallets.models import Transaction, Wallet
from wallets.services import WalletService

SHIPPING = {
    "shipping_address": "1 Main St",
    "shipping_city": "Springfield",
    "shipping_zip_code": "12345",
    "shipping_country": "US",
}


def make_user(email="user@example.com", role=User.Role.USER, balance=None):
    user = User.objects.create_user(
        email=email,
        password="Str0ng!pass",
        first_name="Test",
        last_name="User",
        role=role,
        is_email_verified=True,
    )
    WalletService.create_wallet(user)
    if balance is not None:
        WalletService.deposit(user.id, balance)
    return user


def make_product(name="Keyboard", price="100.00", stock=10, **extra):
    return Product.objects.create(name=name, description=name, price=Decimal(price), stock=stock, **extra)


def balance_of(user):
    return Wallet.objects.get(user=user).balance


# ============================================================
# Model Tests
# ============================================================


class OrderModelTest(TestCase):
    def test_transitions(self):
        order = Order(status=Order.Status.PENDING)
        self.assertTrue(order.can_transition_to(Order.Status.PROCESSING))
        self.assertTrue(order.can_transition_to(Order.Status.CANCELLED))
        self.assertFalse(order.can_transition_to(Order.Status.SHIPPED))

        order.status = Order.Status.SHIPPED
        self.assertFalse(order.can_transition_to(Order.Status.CANCELLED))

        order.status = Order.Status.COMPLETED
        self.assertFalse(order.can_transition_to(Order.Status.PENDING))


# ============================================================
# Service Tests
# ============================================================


class PriceBreakdownTest(TestCase):
    def test_shipping_charged_at_threshold(self):
        pricing = price_breakdown(Decimal("500.00"))
        self.assertEqual(pricing["tax"], Decimal("50.00"))
        self.assertEqual(pricing["shipping_fee"], Decimal("50.00"))
        self.assertEqual(pricing["total"], Decimal("600.00"))

    def test_free_shipping_above_threshold(self):
        pricing = price_breakdown(Decimal("500.01"))
        self.assertEqual(pricing["shipping_fee"], Decimal("0.00"))
        self.assertEqual(pricing["total"], Decimal("550.01"))

    def test_tax_rounds_half_up(self):
        self.assertEqual(price_breakdown(Decimal("0.05"))["tax"], Decimal("0.01"))


class CreateOrderServiceTest(TestCase):
    def setUp(self):
        self.user = make_user()
        self.product = make_product(stock=5)

    def test_create_order_reserves_stock(self):
        order = OrderService.create_order(
            self.user,
            [
                {"product_id": self.product.id, "quantity": 1},
                {"product_id": self.product.id, "quantity": 1},
            ],
            **SHIPPING,
        )

        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertFalse(order.is_paid)
        self.assertEqual(order.items.count(), 1)
        self.assertEqual(order.items.get().quantity, 2)
        self.assertEqual(order.total, Decimal("270.00"))
        self.assertEqual(order.shipping_city, "Springfield")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)

    def test_create_order_over_stock(self):
        with self.assertRaisesMessage(InvalidOperation, "Insufficient stock for Keyboard"):
            OrderService.create_order(self.user, [{"product_id": self.product.id, "quantity": 6}])

    def test_create_order_unknown_product(self):
        with self.assertRaises(NotFound):
            OrderService.create_order(self.user, [{"product_id": uuid.uuid4(), "quantity": 1}])

    def test_create_order_without_items(self):
        with self.assertRaises(InvalidOperation):
            OrderService.create_order(self.user, [])


class CheckoutServiceTest(TransactionTestCase):
    def setUp(self):
        self.user = make_user(balance=Decimal("1000.00"))
        self.keyboard = make_product(stock=5)
        self.mouse = make_product("Mouse", price="25.00", stock=3)

    def fill_cart(self):
        CartItem.objects.create(user=self.user, product=self.keyboard, quantity=2)
        CartItem.objects.create(user=self.user, product=self.mouse, quantity=1)

    def test_checkout_pays_and_clears_cart(self):
        self.fill_cart()

        order = OrderService.checkout(self.user, **SHIPPING)

        # 225.00 subtotal + 22.50 tax + 50.00 shipping
        self.assertEqual(order.total, Decimal("297.50"))
        self.assertEqual(order.status, Order.Status.PROCESSING)
        self.assertTrue(order.is_paid)
        self.assertIsNotNone(order.paid_at)
        self.assertEqual(balance_of(self.user), Decimal("702.50"))
        self.assertEqual(Product.objects.get(id=self.keyboard.id).stock, 3)
        self.assertEqual(Product.objects.get(id=self.mouse.id).stock, 2)
        self.assertFalse(CartItem.objects.filter(user=self.user).exists())

        payment = Transaction.objects.get(transaction_type=Transaction.TransactionType.PAYMENT)
        self.assertEqual(payment.amount, Decimal("297.50"))
        self.assertEqual(payment.reference_type, "order")
        self.assertEqual(payment.reference_id, str(order.id))

    def test_checkout_empty_cart(self):
        with self.assertRaisesMessage(InvalidOperation, "Cart is empty"):
            OrderService.checkout(self.user, **SHIPPING)

    def test_checkout_insufficient_balance_changes_nothing(self):
        poor = make_user("poor@example.com", balance=Decimal("10.00"))
        CartItem.objects.create(user=poor, product=self.keyboard, quantity=1)

        with self.assertRaises(InsufficientFunds):
            OrderService.checkout(poor, **SHIPPING)

        self.assertEqual(balance_of(poor), Decimal("10.00"))
        self.assertEqual(Product.objects.get(id=self.keyboard.id).stock, 5)
        self.assertEqual(Order.objects.count(), 0)
        self.assertTrue(CartItem.objects.filter(user=poor).exists())

    def test_checkout_stock_changed_since_added(self):
        self.fill_cart()
        Product.objects.filter(id=self.keyboard.id).update(stock=1)

        with self.assertRaises(InvalidOperation):
            OrderService.checkout(self.user, **SHIPPING)

        self.assertEqual(balance_of(self.user), Decimal("1000.00"))
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 2)


class OrderLifecycleServiceTest(TransactionTestCase):
    def setUp(self):
        self.user = make_user(balance=Decimal("1000.00"))
        self.product = make_product(stock=5)
        CartItem.objects.create(user=self.user, product=self.product, quantity=2)
        self.order = OrderService.checkout(self.user, **SHIPPING)

    def test_cancel_refunds_and_restocks(self):
        order = OrderService.cancel(self.order.id, self.user, "Changed my mind")

        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.assertEqual(order.cancellation_reason, "Changed my mind")
        self.assertIsNotNone(order.cancelled_at)
        self.assertEqual(balance_of(self.user), Decimal("1000.00"))
        self.assertEqual(Product.objects.get(id=self.product.id).stock, 5)

        refund = Transaction.objects.get(transaction_type=Transaction.TransactionType.REFUND)
        self.assertEqual(refund.amount, self.order.total)

    def test_cancel_after_partial_refund_refunds_remainder(self):
        WalletService.refund(self.user.id, self.order.id, Decimal("20.00"))
        OrderService.cancel(self.order.id, self.user)

        self.assertEqual(balance_of(self.user), Decimal("1000.00"))
        self.assertEqual(Transaction.refunded_total_for_order(self.order.id), self.order.total)

    def test_refund_after_cancel_is_rejected(self):
        OrderService.cancel(self.order.id, self.user)

        with self.assertRaises(InvalidOperation):
            WalletService.refund(self.user.id, self.order.id, Decimal("0.01"))
        self.assertEqual(balance_of(self.user), Decimal("1000.00"))

    def test_cancel_someone_elses_order(self):
        other = make_user("other@example.com")
        with self.assertRaises(PermissionDenied):
            OrderService.cancel(self.order.id, other)

    def test_cancel_shipped_order(self):
        OrderService.update_status(self.order.id, Order.Status.SHIPPED, tracking_number="TRK1")
        with self.assertRaisesMessage(InvalidOperation, "Cannot cancel order with status shipped"):
            OrderService.cancel(self.order.id, self.user)

    def test_cancel_unpaid_order_only_restocks(self):
        pending = OrderService.create_order(self.user, [{"product_id": self.product.id, "quantity": 1}])
        OrderService.cancel(pending.id, self.user)

        self.assertEqual(Product.objects.get(id=self.product.id).stock, 3)
        self.assertFalse(
            Transaction.objects.filter(transaction_type=Transaction.TransactionType.REFUND).exists()
        )

    def test_update_status_stamps_timestamps(self):
        order = OrderService.update_status(self.order.id, Order.Status.SHIPPED, tracking_number="TRK1")
        self.assertEqual(order.tracking_number, "TRK1")
        self.assertIsNotNone(order.shipped_at)

        order = OrderService.update_status(self.order.id, Order.Status.DELIVERED)
        self.assertIsNotNone(order.delivered_at)

        order = OrderService.update_status(self.order.id, Order.Status.COMPLETED)
        self.assertEqual(order.status, Order.Status.COMPLETED)

    def test_update_status_rejects_invalid_transition(self):
        with self.assertRaisesMessage(InvalidOperation, "Cannot transition from processing to delivered"):
            OrderService.update_status(self.order.id, Order.Status.DELIVERED)

    def test_admin_cancel_refunds(self):
        order = OrderService.update_status(self.order.id, Order.Status.CANCELLED, notes="Out of stock")

        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.assertEqual(order.cancellation_reason, "Out of stock")
        self.assertEqual(balance_of(self.user), Decimal("1000.00"))

    def test_get_order_visibility(self):
        other = make_user("other@example.com")
        admin = make_user("admin@example.com", role=User.Role.ADMIN)

        self.assertEqual(OrderService.get_order(self.order.id, self.user).id, self.order.id)
        self.assertEqual(OrderService.get_order(self.order.id, admin).id, self.order.id)
        with self.assertRaises(NotFound):
            OrderService.get_order(self.order.id, other)

    def test_stats(self):
        stats = OrderService.stats()

        self.assertEqual(stats["total_orders"], 1)
        self.assertEqual(stats["orders_by_status"][Order.Status.PROCESSING], 1)
        self.assertEqual(stats["orders_by_status"][Order.Status.CANCELLED], 0)
        self.assertEqual(stats["revenue"]["this_month"], self.order.total)
        self.assertEqual(stats["revenue"]["growth"], 100.0)
        self.assertEqual(stats["orders"]["this_month"], 1)
        self.assertEqual(stats["top_products"][0]["total_sold"], 2)
        self.assertEqual(stats["recent_orders"][0].id, self.order.id)


# ============================================================
# API Tests
# ============================================================


class OrderAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user(balance=Decimal("1000.00"))
        self.product = make_product(stock=5)
        self.client.force_authenticate(user=self.user)

    def test_checkout(self):
        CartItem.objects.create(user=self.user, product=self.product, quantity=1)

        response = self.client.post("/api/orders/checkout", SHIPPING, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["message"], "Order placed successfully")
        self.assertEqual(response.data["order"]["total"], "160.00")
        self.assertTrue(response.data["order"]["is_paid"])

    def test_checkout_requires_shipping(self):
        CartItem.objects.create(user=self.user, product=self.product, quantity=1)
        response = self.client.post("/api/orders/checkout", {"shipping_city": "Springfield"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_checkout_empty_cart(self):
        response = self.client.post("/api/orders/checkout", SHIPPING, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Cart is empty")

    def test_create_and_list_orders(self):
        payload = dict(SHIPPING, items=[{"product_id": str(self.product.id), "quantity": 2}])
        response = self.client.post("/api/orders/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "pending")

        response = self.client.get("/api/orders/", {"status": "pending"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["items"][0]["quantity"], 2)

    def test_get_and_cancel_order(self):
        order = OrderService.create_order(self.user, [{"product_id": self.product.id, "quantity": 1}])

        response = self.client.get(f"/api/orders/{order.id}")
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("user_email", response.data)

        response = self.client.patch(f"/api/orders/{order.id}/cancel", {"reason": "Oops"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["order"]["status"], "cancelled")

        response = self.client.patch(f"/api/orders/{order.id}/cancel", {}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_other_users_order_is_hidden(self):
        order = OrderService.create_order(self.user, [{"product_id": self.product.id, "quantity": 1}])
        other = APIClient()
        other.force_authenticate(user=make_user("other@example.com"))

        self.assertEqual(other.get(f"/api/orders/{order.id}").status_code, 404)
        self.assertEqual(other.patch(f"/api/orders/{order.id}/cancel", {}, format="json").status_code, 403)

    def test_admin_endpoints_forbidden_for_users(self):
        self.assertEqual(self.client.get("/api/orders/admin/all").status_code, 403)
        self.assertEqual(self.client.get("/api/orders/admin/stats").status_code, 403)


class AdminOrderAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.customer = make_user("customer@example.com")
        self.product = make_product(stock=5)
        self.order = OrderService.create_order(
            self.customer, [{"product_id": self.product.id, "quantity": 1}]
        )
        self.client.force_authenticate(user=self.admin)

    def test_list_all_orders_with_email_search(self):
        response = self.client.get("/api/orders/admin/all", {"search": "customer@"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["user_email"], "customer@example.com")

    def test_update_status(self):
        response = self.client.patch(
            f"/api/orders/{self.order.id}/status", {"status": "processing"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "processing")

        response = self.client.patch(
            f"/api/orders/{self.order.id}/status", {"status": "completed"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_update_status_invalid_value(self):
        response = self.client.patch(f"/api/orders/{self.order.id}/status", {"status": "lost"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        response = self.client.get("/api/orders/admin/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_orders"], 1)
        self.assertEqual(response.data["recent_orders"][0]["id"], str(self.order.id))

    def test_staff_can_view_any_order(self):
        response = self.client.get(f"/api/orders/{self.order.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["user_email"], "customer@example.com")
