import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CartItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("guest_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("quantity", models.PositiveIntegerField(default=1)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cart_items",
                        to="catalog.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cart_items",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(check=models.Q(("quantity__gte", 1)), name="cart_item_quantity_positive"),
                    models.CheckConstraint(
                        check=models.Q(
                            models.Q(("guest_id__isnull", True), ("user__isnull", False)),
                            models.Q(("guest_id__isnull", False), ("user__isnull", True)),
                            _connector="OR",
                        ),
                        name="cart_item_single_owner",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("user__isnull", False)),
                        fields=("user", "product"),
                        name="cart_item_unique_user_product",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("guest_id__isnull", False)),
                        fields=("guest_id", "product"),
                        name="cart_item_unique_guest_product",
                    ),
                ],
            },
        ),
    ]
