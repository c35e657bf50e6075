import uuid
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from catalog.models import Product, Review
from catalog.services import ProductService, ReviewService
from common.exceptions import Conflict, InvalidOperation, NotFound, PermissionDenied
from orders.models import Order, OrderItem


def make_user(email="user@example.com", role=User.Role.USER):
    return User.objects.create_user(
        email=email,
        password="Str0ng!Pass",
        first_name="Jane",
        last_name="Doe",
        role=role,
        is_email_verified=True,
    )


def make_product(name="Laptop", price="999.99", stock=10, **extra):
    return Product.objects.create(
        name=name, description=f"{name} description", price=Decimal(price), stock=stock, **extra
    )


def make_order(user, product, quantity=1, status=Order.Status.DELIVERED):
    order = Order.objects.create(
        user=user,
        subtotal=product.price * quantity,
        total=product.price * quantity,
        status=status,
    )
    OrderItem.objects.create(
        order=order,
        product=product,
        product_name=product.name,
        price=product.price,
        quantity=quantity,
        total=product.price * quantity,
    )
    return order


# ============================================================
# Model Tests
# ============================================================


class ProductModelTest(TestCase):
    def test_active_and_low_stock(self):
        make_product("Laptop", stock=50)
        low = make_product("Mouse", price="19.99", stock=3)
        make_product("Hidden", stock=1, is_active=False)

        self.assertEqual(Product.active().count(), 2)
        self.assertEqual(list(Product.low_stock(10)), [low])

    def test_price_must_be_positive(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_product(price="0.00")


class ReviewModelTest(TestCase):
    def test_one_review_per_user_and_product(self):
        user = make_user()
        product = make_product()
        Review.objects.create(user=user, product=product, rating=4)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Review.objects.create(user=user, product=product, rating=5)

    def test_rating_range(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Review.objects.create(user=make_user(), product=make_product(), rating=6)


# ============================================================
# Service Tests
# ============================================================


class ProductServiceTest(TestCase):
    def setUp(self):
        self.laptop = make_product("Laptop", price="999.99", stock=20)
        self.mouse = make_product("Wireless Mouse", price="19.99", stock=5)
        self.cable = make_product("USB Cable", price="4.50", stock=100)
        make_product("Retired Mouse", price="9.99", is_active=False)

    def test_list_products_search_and_price_filters(self):
        self.assertEqual(list(ProductService.list_products(search="mouse")), [self.mouse])
        self.assertEqual(
            list(ProductService.list_products(min_price=Decimal("5"), max_price=Decimal("100"))),
            [self.mouse],
        )

    def test_list_products_sorting(self):
        products = ProductService.list_products(sort_by="price", order="asc")
        self.assertEqual(list(products), [self.cable, self.mouse, self.laptop])

    def test_search_requires_query(self):
        self.assertEqual(ProductService.search(""), [])
        self.assertEqual(ProductService.search("usb"), [self.cable])

    def test_get_inactive_product(self):
        retired = Product.objects.get(name="Retired Mouse")
        with self.assertRaises(NotFound):
            ProductService.get_product(retired.id)
        self.assertEqual(ProductService.get_product(retired.id, include_inactive=True), retired)

    def test_remove_product_is_soft_delete(self):
        ProductService.remove_product(self.laptop.id)
        self.laptop.refresh_from_db()
        self.assertFalse(self.laptop.is_active)

    def test_update_stock(self):
        product = ProductService.update_stock(self.mouse.id, 42)
        self.assertEqual(product.stock, 42)
        with self.assertRaises(InvalidOperation):
            ProductService.update_stock(self.mouse.id, -1)
        with self.assertRaises(NotFound):
            ProductService.update_stock(uuid.uuid4(), 1)

    def test_low_stock_default_threshold(self):
        self.assertEqual(ProductService.low_stock(), [self.mouse])
        self.assertEqual(ProductService.low_stock(20), [self.mouse, self.laptop])

    def test_top_selling_ignores_cancelled_orders(self):
        user = make_user()
        make_order(user, self.mouse, quantity=3)
        make_order(user, self.laptop, quantity=1)
        make_order(user, self.laptop, quantity=10, status=Order.Status.CANCELLED)

        top = ProductService.top_selling(10)

        self.assertEqual([row["name"] for row in top], ["Wireless Mouse", "Laptop"])
        self.assertEqual(top[0]["total_sold"], 3)
        self.assertEqual(top[0]["revenue"], Decimal("59.97"))


class ReviewServiceTest(TestCase):
    def setUp(self):
        self.user = make_user()
        self.product = make_product()

    def test_create_review_requires_purchase(self):
        with self.assertRaises(PermissionDenied):
            ReviewService.create_review(self.user, self.product.id, 5)

    def test_cancelled_order_does_not_count_as_purchase(self):
        make_order(self.user, self.product, status=Order.Status.CANCELLED)
        self.assertFalse(ReviewService.can_review(self.user, self.product.id))

    def test_create_review(self):
        make_order(self.user, self.product)
        self.assertTrue(ReviewService.can_review(self.user, self.product.id))

        review = ReviewService.create_review(self.user, self.product.id, 4, "Solid")
        self.assertEqual(review.rating, 4)
        self.assertFalse(ReviewService.can_review(self.user, self.product.id))

    def test_duplicate_review_conflicts_before_purchase_check(self):
        Review.objects.create(user=self.user, product=self.product, rating=3)
        with self.assertRaises(Conflict):
            ReviewService.create_review(self.user, self.product.id, 5)

    def test_unknown_product(self):
        with self.assertRaises(NotFound):
            ReviewService.create_review(self.user, uuid.uuid4(), 5)

    def test_rating_summary(self):
        other = make_user("other@example.com")
        Review.objects.create(user=self.user, product=self.product, rating=5)
        Review.objects.create(user=other, product=self.product, rating=2)

        self.assertEqual(
            ReviewService.product_rating(self.product.id),
            {"average_rating": 3.5, "total_reviews": 2},
        )
        self.assertEqual(
            ReviewService.product_rating(uuid.uuid4()),
            {"average_rating": 0.0, "total_reviews": 0},
        )

    def test_only_owner_updates_or_deletes(self):
        review = Review.objects.create(user=self.user, product=self.product, rating=5)
        other = make_user("other@example.com")

        with self.assertRaises(NotFound):
            ReviewService.update_review(review.id, other, rating=1)
        with self.assertRaises(NotFound):
            ReviewService.delete_review(review.id, other)

        updated = ReviewService.update_review(review.id, self.user, comment="Changed my mind")
        self.assertEqual(updated.comment, "Changed my mind")
        self.assertEqual(updated.rating, 5)

        ReviewService.delete_review(review.id, self.user)
        self.assertFalse(Review.objects.filter(id=review.id).exists())


# ============================================================
# API Tests
# ============================================================


class ProductAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.product = make_product()

    def test_list_is_public_and_paginated(self):
        response = self.client.get("/api/products/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["price"], "999.99")

    def test_list_rejects_inverted_price_range(self):
        response = self.client.get("/api/products/?min_price=50&max_price=10")
        self.assertEqual(response.status_code, 400)

    def test_detail_hides_inactive_from_public(self):
        ProductService.remove_product(self.product.id)

        response = self.client.get(f"/api/products/{self.product.id}")
        self.assertEqual(response.status_code, 404)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f"/api/products/{self.product.id}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["is_active"])

    def test_create_requires_admin(self):
        payload = {"name": "Phone", "description": "A phone", "price": "499.00", "stock": 3}

        self.client.force_authenticate(user=make_user())
        response = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["name"], "Phone")

    def test_create_rejects_zero_price(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/products/", {"name": "Free", "description": "x", "price": "0.00"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_update_and_delete(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(f"/api/products/{self.product.id}", {"price": "899.99"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["price"], "899.99")

        response = self.client.delete(f"/api/products/{self.product.id}")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Product.objects.get(id=self.product.id).is_active)

    def test_stock_update(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(f"/api/products/{self.product.id}/stock", {"quantity": 7}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["stock"], 7)

    def test_search_and_top_selling(self):
        response = self.client.get("/api/products/search?q=lap")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

        response = self.client.get("/api/products/top-selling?limit=5")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, [])

    def test_low_stock_requires_admin(self):
        response = self.client.get("/api/products/low-stock")
        self.assertEqual(response.status_code, 401)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/products/low-stock?threshold=10")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)


class ReviewAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.product = make_product()
        self.client.force_authenticate(user=self.user)

    def test_review_after_purchase(self):
        make_order(self.user, self.product)

        response = self.client.post(
            f"/api/products/{self.product.id}/reviews", {"rating": 5, "comment": "Great"}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["review"]["user"]["first_name"], "Jane")

        response = self.client.post(f"/api/products/{self.product.id}/reviews", {"rating": 4}, format="json")
        self.assertEqual(response.status_code, 409)

    def test_review_without_purchase(self):
        response = self.client.post(f"/api/products/{self.product.id}/reviews", {"rating": 5}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_review_invalid_rating(self):
        response = self.client.post(f"/api/products/{self.product.id}/reviews", {"rating": 0}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_list_reviews_with_rating(self):
        Review.objects.create(user=self.user, product=self.product, rating=4)

        response = APIClient().get(f"/api/products/{self.product.id}/reviews")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["rating"], {"average_rating": 4.0, "total_reviews": 1})

    def test_list_reviews_unknown_product(self):
        response = APIClient().get(f"/api/products/{uuid.uuid4()}/reviews")
        self.assertEqual(response.status_code, 404)

    def test_can_review_and_my_reviews(self):
        response = self.client.get(f"/api/products/{self.product.id}/can-review")
        self.assertEqual(response.data, {"can_review": False})

        Review.objects.create(user=self.user, product=self.product, rating=3)
        response = self.client.get("/api/reviews/my")
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["reviews"][0]["product_name"], "Laptop")

    def test_update_and_delete_own_review(self):
        review = Review.objects.create(user=self.user, product=self.product, rating=3)

        response = self.client.patch(f"/api/reviews/{review.id}", {"rating": 1}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["review"]["rating"], 1)

        self.client.force_authenticate(user=make_user("other@example.com"))
        response = self.client.delete(f"/api/reviews/{review.id}")
        self.assertEqual(response.status_code, 404)
