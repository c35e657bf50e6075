from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "price", "quantity", "total")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "total", "is_paid", "created_at")
    list_filter = ("status", "is_paid", "payment_method")
    search_fields = ("id", "user__email", "tracking_number")
    readonly_fields = (
        "id",
        "user",
        "subtotal",
        "tax",
        "shipping_fee",
        "total",
        "is_paid",
        "paid_at",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]
