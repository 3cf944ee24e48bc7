import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class GroupOrder(models.Model):
    """
    A shared basket several users fill before one of them (the creator)
    turns it into a single Order. The materialized order is reachable as
    `group.order` once finalized.
    """

    class GroupStatus(models.TextChoices):
        OPEN = "open", _("Open")
        FINALIZED = "finalized", _("Finalized")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invite_code = models.CharField(max_length=6, unique=True)
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.PROTECT, related_name="group_orders"
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="created_groups"
    )
    members = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name="group_orders")
    status = models.CharField(
        max_length=20, choices=GroupStatus.choices, default=GroupStatus.OPEN
    )
    type = models.CharField(
        max_length=20,
        choices=[("delivery", _("Delivery")), ("pickup", _("Pickup"))],
        default="delivery",
    )
    schedule = models.DateTimeField(null=True, blank=True)
    pickup_address = models.JSONField(null=True, blank=True)
    delivery_address = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Group {self.invite_code} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status == self.GroupStatus.OPEN


class GroupOrderItem(models.Model):
    """One member's contribution, priced when it was added."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(GroupOrder, on_delete=models.CASCADE, related_name="items")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="group_order_items"
    )
    item_id = models.UUIDField()
    name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    choice = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    def as_line_item(self) -> dict:
        return {
            "item_id": str(self.item_id),
            "name": self.name,
            "quantity": self.quantity,
            "price": str(self.price),
            "choice": self.choice or {},
            "user_id": str(self.user_id),
        }
