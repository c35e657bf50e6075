import logging

from django.db.models import Avg, Count

from catalog.models import Product, Review
from common.exceptions import Conflict, NotFound, PermissionDenied
from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

# Orders in these states count as a purchase for review purposes.
REVIEWABLE_ORDER_STATUSES = (
    Order.Status.COMPLETED,
    Order.Status.DELIVERED,
    Order.Status.PENDING,
    Order.Status.PROCESSING,
)
SORT_FIELDS = ("created_at", "rating")


class ReviewService:
    @staticmethod
    def list_product_reviews(product_id, sort_by="created_at", order="desc"):
        sort_field = sort_by if sort_by in SORT_FIELDS else "created_at"
        if (order or "desc").lower() == "desc":
            sort_field = f"-{sort_field}"
        return (
            Review.objects.filter(product_id=product_id)
            .select_related("user")
            .order_by(sort_field, "id")
        )

    @staticmethod
    def product_rating(product_id) -> dict:
        row = Review.objects.filter(product_id=product_id).aggregate(
            average=Avg("rating"), count=Count("id")
        )
        return {
            "average_rating": round(float(row["average"] or 0), 2),
            "total_reviews": row["count"],
        }

    @staticmethod
    def my_reviews(user):
        return Review.objects.filter(user=user).select_related("product").order_by("-created_at")

    @staticmethod
    def has_purchased(user, product_id) -> bool:
        return OrderItem.objects.filter(
            order__user=user,
            order__status__in=REVIEWABLE_ORDER_STATUSES,
            product_id=product_id,
        ).exists()

    @staticmethod
    def can_review(user, product_id) -> bool:
        if Review.objects.filter(user=user, product_id=product_id).exists():
            return False
        return ReviewService.has_purchased(user, product_id)

    @staticmethod
    def create_review(user, product_id, rating, comment="") -> Review:
        """
        Raises:
            NotFound: If the product does not exist.
            Conflict: If the user already reviewed it.
            PermissionDenied: If the user never ordered it.
        """
        if not Product.objects.filter(id=product_id).exists():
            raise NotFound("Product not found")

        if Review.objects.filter(user=user, product_id=product_id).exists():
            raise Conflict("You have already reviewed this product")

        if not ReviewService.has_purchased(user, product_id):
            raise PermissionDenied("You can only review products you have purchased")

        review = Review.objects.create(
            user=user, product_id=product_id, rating=rating, comment=comment or ""
        )
        logger.info("Review created: %s user=%s product=%s", review.id, user.id, product_id)
        return review

    @staticmethod
    def _owned_review(review_id, user, action) -> Review:
        review = Review.objects.filter(id=review_id, user=user).first()
        if review is None:
            raise NotFound(f"Review not found or you do not have permission to {action} it")
        return review

    @staticmethod
    def update_review(review_id, user, rating=None, comment=None) -> Review:
        review = ReviewService._owned_review(review_id, user, "update")
        fields = []
        if rating is not None:
            review.rating = rating
            fields.append("rating")
        if comment is not None:
            review.comment = comment
            fields.append("comment")
        if fields:
            review.save(update_fields=[*fields, "updated_at"])
        return review

    @staticmethod
    def delete_review(review_id, user) -> None:
        review = ReviewService._owned_review(review_id, user, "delete")
        review.delete()
        logger.info("Review deleted: %s user=%s", review_id, user.id)
