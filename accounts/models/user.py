from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.db import models

from common.models import BaseModel


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.USER)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.SUPER_ADMIN)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_email_verified", True)
        return self._create_user(email, password, **extra_fields)


class User(BaseModel, AbstractBaseUser, PermissionsMixin):
    """
    A shop account. The role decides which endpoints the account may reach.

    Staff roles (moderator, admin, super_admin) share the same table; the
    ``Admin`` proxy model narrows the queryset to them.
    """

    class Role(models.TextChoices):
        USER = "user", "User"
        MODERATOR = "moderator", "Moderator"
        ADMIN = "admin", "Admin"
        SUPER_ADMIN = "super_admin", "Super admin"

    STAFF_ROLES = (Role.MODERATOR, Role.ADMIN, Role.SUPER_ADMIN)
    ADMIN_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)

    email = models.EmailField(unique=True, db_index=True)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    phone_number = models.CharField(max_length=16, blank=True, default="")
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    is_active = models.BooleanField(default=True)
    is_email_verified = models.BooleanField(default=False)
    email_verification_token = models.CharField(max_length=64, null=True, blank=True)
    reset_password_token = models.CharField(max_length=64, null=True, blank=True)
    reset_password_expires = models.DateTimeField(null=True, blank=True)
    is_two_factor_enabled = models.BooleanField(default=False)
    two_factor_secret = models.CharField(max_length=64, null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    class Meta(BaseModel.Meta):
        indexes = [
            models.Index(fields=["role"], name="idx_user_role"),
        ]

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def is_staff(self):
        return self.role in self.STAFF_ROLES

    @property
    def is_admin(self):
        return self.role in self.ADMIN_ROLES

    @property
    def is_super_admin(self):
        return self.role == self.Role.SUPER_ADMIN

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class AdminManager(UserManager):
    def get_queryset(self):
        return super().get_queryset().filter(role__in=User.STAFF_ROLES)


class Admin(User):
    """Staff accounts: moderators, admins and super admins."""

    objects = AdminManager()

    class Meta:
        proxy = True
        verbose_name = "admin"
        verbose_name_plural = "admins"
