from django.urls import path

from catalog.views import MyReviewsView, ReviewDetailView

urlpatterns = [
    path("my", MyReviewsView.as_view(), name="review-my"),
    path("<uuid:pk>", ReviewDetailView.as_view(), name="review-detail"),
]
