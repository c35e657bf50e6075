from rest_framework import serializers

from accounts.models import User


class UserSerializer(serializers.ModelSerializer):
    """Public summary of an account, returned by login and /me."""

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "first_name",
            "last_name",
            "phone_number",
            "role",
            "is_active",
            "is_email_verified",
            "is_two_factor_enabled",
            "created_at",
        )
        read_only_fields = fields


class ProfileSerializer(UserSerializer):
    wallet = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ("last_login", "updated_at", "wallet")
        read_only_fields = fields

    def get_wallet(self, obj):
        wallet = getattr(obj, "wallet", None)
        if wallet is None:
            return None
        return {"id": str(wallet.id), "balance": str(wallet.balance)}
