import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Restaurant(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("name"), max_length=200)
    address = models.JSONField(
        _("address"),
        default=dict,
        blank=True,
        help_text=_("Street address snapshot used as the pickup address for orders."),
    )
    phone_number = models.CharField(_("phone number"), max_length=20, blank=True)
    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["is_active", "name"], name="restaurant_active_name_idx")]

    def __str__(self):
        return self.name


class MenuItem(models.Model):
    """
    A dish on a restaurant's menu.

    `options` carries the configurable choices as three lists of
    `{"id", "name", "priceDelta"}` objects under the keys `sizes`, `addOns`
    and `extras`. A customer's selection is stored on the order as
    `{"sizeId", "addOnIds", "extraIds"}`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        Restaurant, on_delete=models.CASCADE, related_name="menu_items"
    )
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)
    price = models.DecimalField(
        _("price"),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    is_available = models.BooleanField(_("available"), default=True)
    options = models.JSONField(_("options"), default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["restaurant", "is_available"], name="menuitem_rest_avail_idx")
        ]

    def __str__(self):
        return f"{self.name} ({self.restaurant_id})"


class PlatformSettings(models.Model):
    """
    Platform-wide business parameters. Exactly one row exists (pk=1); read it
    through `restaurants.config.app_settings` rather than querying directly.
    """

    tax_rate = models.DecimalField(
        _("tax rate (%)"), max_digits=5, decimal_places=2, default=Decimal("5.00")
    )
    delivery_fee = models.DecimalField(
        _("delivery fee"), max_digits=12, decimal_places=2, default=Decimal("5.00")
    )
    commission_rate = models.DecimalField(
        _("commission rate (%)"), max_digits=5, decimal_places=2, default=Decimal("10.00")
    )
    currency = models.CharField(_("currency"), max_length=3, default="NGN")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("platform settings")
        verbose_name_plural = _("platform settings")

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _created = cls.objects.get_or_create(pk=1)
        return obj

    def __str__(self):
        return "Platform settings"
