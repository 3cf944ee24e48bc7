import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("group_orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("items", models.JSONField(default=list, help_text="Line-item snapshots: item_id, name, quantity, unit price and option choice.")),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("tax", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("scheduled", "Scheduled"), ("accepted", "Accepted"), ("preparing", "Preparing"), ("ready_for_pickup", "Ready for Pickup"), ("picked_up", "Picked Up"), ("delivered", "Delivered"), ("rejected", "Rejected"), ("cancelled", "Cancelled")], default="pending", max_length=20)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid")], default="pending", max_length=20)),
                ("payment_reference", models.CharField(blank=True, max_length=100, null=True)),
                ("type", models.CharField(choices=[("delivery", "Delivery"), ("pickup", "Pickup")], default="delivery", max_length=20)),
                ("schedule", models.DateTimeField(blank=True, null=True)),
                ("pickup_address", models.JSONField(blank=True, null=True)),
                ("delivery_address", models.JSONField(blank=True, null=True)),
                ("gift", models.BooleanField(default=False)),
                ("gift_message", models.TextField(blank=True)),
                ("recipient_name", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("driver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="deliveries", to=settings.AUTH_USER_MODEL)),
                ("group", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order", to="group_orders.grouporder")),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="restaurants.restaurant")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["type", "driver", "status", "created_at"], name="order_delivery_queue_idx"),
                    models.Index(fields=["driver", "status"], name="order_driver_status_idx"),
                    models.Index(fields=["restaurant", "-created_at"], name="order_restaurant_recent_idx"),
                    models.Index(fields=["user", "-created_at"], name="order_user_recent_idx"),
                    models.Index(fields=["status", "schedule"], name="order_status_schedule_idx"),
                ],
            },
        ),
    ]
