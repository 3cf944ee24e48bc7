import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PlatformSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tax_rate", models.DecimalField(decimal_places=2, default=Decimal("5.00"), max_digits=5, verbose_name="tax rate (%)")),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("5.00"), max_digits=12, verbose_name="delivery fee")),
                ("commission_rate", models.DecimalField(decimal_places=2, default=Decimal("10.00"), max_digits=5, verbose_name="commission rate (%)")),
                ("currency", models.CharField(default="NGN", max_length=3, verbose_name="currency")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "platform settings",
                "verbose_name_plural": "platform settings",
            },
        ),
        migrations.CreateModel(
            name="Restaurant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("address", models.JSONField(blank=True, default=dict, help_text="Street address snapshot used as the pickup address for orders.", verbose_name="address")),
                ("phone_number", models.CharField(blank=True, max_length=20, verbose_name="phone number")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["is_active", "name"], name="restaurant_active_name_idx")],
            },
        ),
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                ("price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))], verbose_name="price")),
                ("is_available", models.BooleanField(default=True, verbose_name="available")),
                ("options", models.JSONField(blank=True, default=dict, verbose_name="options")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="menu_items", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["restaurant", "is_available"], name="menuitem_rest_avail_idx")],
            },
        ),
    ]
