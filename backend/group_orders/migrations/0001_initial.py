import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="GroupOrder",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("invite_code", models.CharField(max_length=6, unique=True)),
                ("status", models.CharField(choices=[("open", "Open"), ("finalized", "Finalized")], default="open", max_length=20)),
                ("type", models.CharField(choices=[("delivery", "Delivery"), ("pickup", "Pickup")], default="delivery", max_length=20)),
                ("schedule", models.DateTimeField(blank=True, null=True)),
                ("pickup_address", models.JSONField(blank=True, null=True)),
                ("delivery_address", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("creator", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_groups", to=settings.AUTH_USER_MODEL)),
                ("members", models.ManyToManyField(related_name="group_orders", to=settings.AUTH_USER_MODEL)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="group_orders", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="GroupOrderItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("item_id", models.UUIDField()),
                ("name", models.CharField(max_length=200)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("choice", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="group_orders.grouporder")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="group_order_items", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
    ]
