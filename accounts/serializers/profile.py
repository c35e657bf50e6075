from rest_framework import serializers

from accounts.models import User
from accounts.serializers.fields import name_field, phone_field


class UpdateProfileSerializer(serializers.Serializer):
    first_name = name_field(required=False)
    last_name = name_field(required=False)
    phone_number = phone_field()


class UserQuerySerializer(serializers.Serializer):
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class UpdateUserSerializer(UpdateProfileSerializer):
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)
