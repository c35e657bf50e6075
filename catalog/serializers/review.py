from rest_framework import serializers

from catalog.models import Review
from catalog.services.review import SORT_FIELDS


class ReviewSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = Review
        fields = (
            "id",
            "user",
            "product_id",
            "product_name",
            "rating",
            "comment",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_user(self, obj):
        return {
            "id": str(obj.user_id),
            "first_name": obj.user.first_name,
            "last_name": obj.user.last_name,
        }


class CreateReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")


class UpdateReviewSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    comment = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class ReviewQuerySerializer(serializers.Serializer):
    sort_by = serializers.ChoiceField(choices=SORT_FIELDS, default="created_at")
    order = serializers.ChoiceField(choices=["asc", "desc", "ASC", "DESC"], default="desc")
