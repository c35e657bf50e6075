from django.core.validators import RegexValidator
from rest_framework import serializers

password_validator = RegexValidator(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$",
    "Password must contain uppercase, lowercase, number and special character (@$!%%*?&).",
)
name_validator = RegexValidator(
    r"^[a-zA-Z\s'-]+$",
    "Name can only contain letters, spaces, hyphens, and apostrophes.",
)
phone_validator = RegexValidator(r"^\+?[1-9]\d{1,14}$", "Please provide a valid phone number.")
code_validator = RegexValidator(r"^\d{6}$", "2FA code must be 6 digits.")


def password_field(**kwargs):
    return serializers.CharField(
        min_length=8,
        max_length=128,
        write_only=True,
        trim_whitespace=False,
        validators=[password_validator],
        **kwargs,
    )


def name_field(**kwargs):
    return serializers.CharField(min_length=2, max_length=50, validators=[name_validator], **kwargs)


def phone_field(**kwargs):
    kwargs.setdefault("required", False)
    kwargs.setdefault("allow_blank", True)
    return serializers.CharField(max_length=16, validators=[phone_validator], **kwargs)


def two_factor_code_field(**kwargs):
    return serializers.CharField(min_length=6, max_length=6, validators=[code_validator], **kwargs)
