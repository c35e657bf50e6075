from django.contrib import admin

from cart.models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "guest_id", "product", "quantity", "updated_at")
    search_fields = ("user__email", "guest_id", "product__name")
    readonly_fields = ("id", "created_at", "updated_at")
