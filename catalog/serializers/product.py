from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product
from catalog.services.product import SORT_FIELDS


class ProductSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    stock = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = Product
        fields = (
            "id",
            "name",
            "description",
            "price",
            "stock",
            "image_url",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")


class ProductQuerySerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    min_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False
    )
    max_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False
    )
    sort_by = serializers.ChoiceField(choices=SORT_FIELDS, default="created_at")
    order = serializers.ChoiceField(choices=["asc", "desc", "ASC", "DESC"], default="desc")

    def validate(self, attrs):
        low, high = attrs.get("min_price"), attrs.get("max_price")
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError(
                {"max_price": "Maximum price must be greater than minimum price."}
            )
        return attrs


class StockUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
