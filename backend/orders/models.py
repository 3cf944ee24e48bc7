import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        SCHEDULED = "scheduled", _("Scheduled")
        ACCEPTED = "accepted", _("Accepted")
        PREPARING = "preparing", _("Preparing")
        READY_FOR_PICKUP = "ready_for_pickup", _("Ready for Pickup")
        PICKED_UP = "picked_up", _("Picked Up")
        DELIVERED = "delivered", _("Delivered")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")

    class OrderType(models.TextChoices):
        DELIVERY = "delivery", _("Delivery")
        PICKUP = "pickup", _("Pickup")

    # Statuses a driver can still claim an unassigned delivery from.
    CLAIMABLE_STATUSES = (
        OrderStatus.PENDING,
        OrderStatus.PREPARING,
        OrderStatus.READY_FOR_PICKUP,
    )
    # Statuses during which the assigned driver's location is live.
    ACTIVE_DELIVERY_STATUSES = (
        OrderStatus.ACCEPTED,
        OrderStatus.PREPARING,
        OrderStatus.READY_FOR_PICKUP,
        OrderStatus.PICKED_UP,
    )
    TERMINAL_STATUSES = (
        OrderStatus.DELIVERED,
        OrderStatus.REJECTED,
        OrderStatus.CANCELLED,
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    # Only ever assigned through DeliveryService.accept_order.
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deliveries",
    )
    group = models.OneToOneField(
        "group_orders.GroupOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order",
    )

    items = models.JSONField(
        default=list,
        help_text=_(
            "Line-item snapshots: item_id, name, quantity, unit price and option choice."
        ),
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    payment_reference = models.CharField(max_length=100, blank=True, null=True)
    type = models.CharField(
        max_length=20, choices=OrderType.choices, default=OrderType.DELIVERY
    )
    schedule = models.DateTimeField(null=True, blank=True)

    pickup_address = models.JSONField(null=True, blank=True)
    delivery_address = models.JSONField(null=True, blank=True)

    gift = models.BooleanField(default=False)
    gift_message = models.TextField(blank=True)
    recipient_name = models.CharField(max_length=150, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "driver", "status", "created_at"], name="order_delivery_queue_idx"),
            models.Index(fields=["driver", "status"], name="order_driver_status_idx"),
            models.Index(fields=["restaurant", "-created_at"], name="order_restaurant_recent_idx"),
            models.Index(fields=["user", "-created_at"], name="order_user_recent_idx"),
            models.Index(fields=["status", "schedule"], name="order_status_schedule_idx"),
        ]

    COST_FIELDS = {"subtotal", "tax", "delivery_fee", "total"}

    def save(self, *args, **kwargs):
        # Costs are frozen once the customer has paid.
        if not self._state.adding and self.payment_status == self.PaymentStatus.PAID:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or self.COST_FIELDS.intersection(update_fields):
                stored = (
                    Order.objects.filter(pk=self.pk)
                    .values("subtotal", "tax", "delivery_fee", "total", "payment_status")
                    .first()
                )
                if stored and stored["payment_status"] == self.PaymentStatus.PAID and any(
                    stored[field] != Decimal(str(getattr(self, field))) for field in self.COST_FIELDS
                ):
                    raise ValueError(f"Order {self.pk} is paid; its costs can no longer change.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Order {self.id} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES
