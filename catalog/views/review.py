import logging

from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.serializers import (
    CreateReviewSerializer,
    ReviewQuerySerializer,
    ReviewSerializer,
    UpdateReviewSerializer,
)
from catalog.services import ProductService, ReviewService

logger = logging.getLogger(__name__)


class ProductReviewsView(ListAPIView):
    """
    GET /api/products/<id>/reviews — Paginated reviews plus the rating (public).
    POST /api/products/<id>/reviews — Review a purchased product.
    """

    serializer_class = ReviewSerializer
    throttle_scope = "review_write"

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_throttles(self):
        if self.request.method == "POST":
            return super().get_throttles()
        return []

    def get_queryset(self):
        serializer = ReviewQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return ReviewService.list_product_reviews(self.kwargs["pk"], **serializer.validated_data)

    def list(self, request, *args, **kwargs):
        ProductService.get_product(self.kwargs["pk"])
        page = self.paginate_queryset(self.get_queryset())
        data = self.get_serializer(page, many=True).data
        return self.paginator.get_paginated_response(
            data, extra={"rating": ReviewService.product_rating(self.kwargs["pk"])}
        )

    def post(self, request, pk, *args, **kwargs):
        serializer = CreateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ReviewService.create_review(request.user, pk, **serializer.validated_data)
        return Response(
            {"message": "Review created successfully", "review": ReviewSerializer(review).data},
            status=status.HTTP_201_CREATED,
        )


class ProductRatingView(APIView):
    """GET /api/products/<id>/rating"""

    permission_classes = [AllowAny]

    def get(self, request, pk, *args, **kwargs):
        return Response(ReviewService.product_rating(pk))


class CanReviewView(APIView):
    """GET /api/products/<id>/can-review"""

    def get(self, request, pk, *args, **kwargs):
        return Response({"can_review": ReviewService.can_review(request.user, pk)})


class MyReviewsView(APIView):
    """GET /api/reviews/my"""

    def get(self, request, *args, **kwargs):
        reviews = list(ReviewService.my_reviews(request.user))
        return Response(
            {"reviews": ReviewSerializer(reviews, many=True).data, "count": len(reviews)}
        )


class ReviewDetailView(APIView):
    """PATCH|DELETE /api/reviews/<id> — Owner only."""

    throttle_scope = "review_edit"

    def patch(self, request, pk, *args, **kwargs):
        serializer = UpdateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ReviewService.update_review(pk, request.user, **serializer.validated_data)
        return Response(
            {"message": "Review updated successfully", "review": ReviewSerializer(review).data}
        )

    def delete(self, request, pk, *args, **kwargs):
        ReviewService.delete_review(pk, request.user)
        return Response({"message": "Review deleted successfully"})
