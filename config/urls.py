from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls.auth")),
    path("api/admin/auth/", include("accounts.urls.admin_auth")),
    path("api/profile/", include("accounts.urls.profile")),
    path("api/users/", include("accounts.urls.users")),
    path("api/products/", include("catalog.urls.products")),
    path("api/reviews/", include("catalog.urls.reviews")),
    path("api/cart/", include("cart.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/wallet/", include("wallets.urls.wallet")),
    path("api/transactions/", include("wallets.urls.transactions")),
]
