from django.urls import path

from accounts.views import DeactivateUserView, UserDetailView, UserListView, UserStatsView

urlpatterns = [
    path("", UserListView.as_view(), name="user-list"),
    path("stats", UserStatsView.as_view(), name="user-stats"),
    path("<uuid:pk>", UserDetailView.as_view(), name="user-detail"),
    path("<uuid:pk>/deactivate", DeactivateUserView.as_view(), name="user-deactivate"),
]
