from django.urls import path

from accounts.views import AdminProfileView, ProfileView

urlpatterns = [
    path("", ProfileView.as_view(), name="profile"),
    path("admin", AdminProfileView.as_view(), name="profile-admin"),
]
