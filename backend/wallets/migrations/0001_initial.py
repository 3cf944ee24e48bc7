import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

OWNER_CHOICES = [("restaurant", "Restaurant"), ("driver", "Driver"), ("customer", "Customer")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        ("restaurants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="WalletAccount",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("owner_type", models.CharField(choices=OWNER_CHOICES, max_length=20)),
                ("owner_id", models.UUIDField()),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("currency", models.CharField(default="NGN", max_length=3)),
                ("paystack_customer_code", models.CharField(blank=True, max_length=100, null=True)),
                ("paystack_virtual_account", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("owner_type", "owner_id"), name="wallet_owner_unique"),
                    models.CheckConstraint(condition=models.Q(balance__gte=0), name="wallet_balance_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransferRecipient",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("owner_type", models.CharField(choices=OWNER_CHOICES, max_length=20)),
                ("owner_id", models.UUIDField()),
                ("paystack_recipient_code", models.CharField(max_length=100)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("owner_type", "owner_id"), name="recipient_owner_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WalletTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("credit", "Credit"), ("debit", "Debit")], max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("reference", models.CharField(max_length=100, unique=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("success", "Success"), ("failed", "Failed")], default="pending", max_length=10)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("meta", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("wallet", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="wallets.walletaccount")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name="wallet_tx_amount_positive"),
                ],
                "indexes": [
                    models.Index(fields=["wallet", "-created_at"], name="wallet_tx_recent_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EarningsLedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("trigger", models.CharField(choices=[("payment_confirmed", "Payment Confirmed"), ("delivery_completed", "Delivery Completed")], max_length=30)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("tax", models.DecimalField(decimal_places=2, max_digits=12)),
                ("delivery_fee", models.DecimalField(decimal_places=2, max_digits=12)),
                ("platform_commission", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("restaurant_earning", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("driver_earning", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("status", models.CharField(choices=[("accrued", "Accrued"), ("paid_out", "Paid Out")], default="accrued", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("driver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ledger_entries", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="orders.order")),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "earnings ledger entries",
                "constraints": [
                    models.UniqueConstraint(fields=("order", "trigger"), name="ledger_order_trigger_unique"),
                ],
            },
        ),
    ]
