from django.contrib import admin

from catalog.models import Product, Review


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "price", "stock", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("id", "name", "description")
    readonly_fields = ("id", "created_at", "updated_at")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("product__name", "user__email", "comment")
    readonly_fields = ("id", "user", "product", "created_at", "updated_at")
