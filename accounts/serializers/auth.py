from rest_framework import serializers

from accounts.models import User
from accounts.serializers.fields import name_field, password_field, phone_field, two_factor_code_field


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    password = password_field()
    first_name = name_field()
    last_name = name_field()
    phone_number = phone_field()

    def validate_email(self, value):
        return value.lower()


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    two_factor_code = two_factor_code_field(required=False)


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False)


class VerifyEmailSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)
    new_password = password_field()


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = password_field()


class TwoFactorCodeSerializer(serializers.Serializer):
    code = two_factor_code_field()


class UpdateAdminRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[User.Role.ADMIN, User.Role.MODERATOR])
