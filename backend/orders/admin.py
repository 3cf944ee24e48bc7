from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "restaurant",
        "user",
        "driver",
        "type",
        "status",
        "payment_status",
        "total",
        "created_at",
    )
    list_filter = ("status", "payment_status", "type", "restaurant")
    search_fields = ("id", "user__email", "driver__email", "payment_reference")
    readonly_fields = (
        "items",
        "subtotal",
        "tax",
        "delivery_fee",
        "total",
        "driver",
        "payment_status",
        "payment_reference",
        "created_at",
        "updated_at",
    )
    date_hierarchy = "created_at"
