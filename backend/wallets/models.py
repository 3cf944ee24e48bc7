import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class OwnerType(models.TextChoices):
    RESTAURANT = "restaurant", _("Restaurant")
    DRIVER = "driver", _("Driver")
    CUSTOMER = "customer", _("Customer")


class WalletAccount(models.Model):
    """
    Balance held by a restaurant, a driver or a customer.

    `balance` is only ever changed by WalletService through single-statement
    F() updates; never assign to it and save().
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_type = models.CharField(max_length=20, choices=OwnerType.choices)
    owner_id = models.UUIDField()
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="NGN")
    paystack_customer_code = models.CharField(max_length=100, blank=True, null=True)
    paystack_virtual_account = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["owner_type", "owner_id"], name="wallet_owner_unique"),
            models.CheckConstraint(
                condition=models.Q(balance__gte=0), name="wallet_balance_non_negative"
            ),
        ]

    def __str__(self):
        return f"{self.owner_type} wallet {self.owner_id} ({self.balance})"


class WalletTransaction(models.Model):
    class TransactionType(models.TextChoices):
        CREDIT = "credit", _("Credit")
        DEBIT = "debit", _("Debit")

    class TransactionStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCESS = "success", _("Success")
        FAILED = "failed", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wallet = models.ForeignKey(WalletAccount, on_delete=models.PROTECT, related_name="transactions")
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    reference = models.CharField(max_length=100, unique=True)
    status = models.CharField(
        max_length=10, choices=TransactionStatus.choices, default=TransactionStatus.PENDING
    )
    description = models.CharField(max_length=255, blank=True)
    meta = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="wallet_tx_amount_positive"),
        ]
        indexes = [
            models.Index(fields=["wallet", "-created_at"], name="wallet_tx_recent_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} [{self.status}] {self.reference}"


class EarningsLedgerEntry(models.Model):
    """
    Immutable record of how one order's money was split. At most one entry
    exists per (order, trigger).
    """

    class Trigger(models.TextChoices):
        PAYMENT_CONFIRMED = "payment_confirmed", _("Payment Confirmed")
        DELIVERY_COMPLETED = "delivery_completed", _("Delivery Completed")

    class EntryStatus(models.TextChoices):
        ACCRUED = "accrued", _("Accrued")
        PAID_OUT = "paid_out", _("Paid Out")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="ledger_entries")
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.PROTECT, related_name="ledger_entries"
    )
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )
    trigger = models.CharField(max_length=30, choices=Trigger.choices)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    tax = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=12, decimal_places=2)
    platform_commission = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    restaurant_earning = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    driver_earning = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=EntryStatus.choices, default=EntryStatus.ACCRUED)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "earnings ledger entries"
        constraints = [
            models.UniqueConstraint(fields=["order", "trigger"], name="ledger_order_trigger_unique"),
        ]

    def __str__(self):
        return f"{self.trigger} for order {self.order_id}"


class TransferRecipient(models.Model):
    """Provider-side payout recipient, cached per wallet owner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_type = models.CharField(max_length=20, choices=OwnerType.choices)
    owner_id = models.UUIDField()
    paystack_recipient_code = models.CharField(max_length=100)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["owner_type", "owner_id"], name="recipient_owner_unique"),
        ]

    def __str__(self):
        return f"{self.owner_type} {self.owner_id} -> {self.paystack_recipient_code}"

    def matches(self, bank_details) -> bool:
        return (
            str(self.details.get("account_number")) == str(bank_details.get("account_number"))
            and str(self.details.get("bank_code")) == str(bank_details.get("bank_code"))
        )
