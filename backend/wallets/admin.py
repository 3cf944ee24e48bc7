from django.contrib import admin
from .models import EarningsLedgerEntry, TransferRecipient, WalletAccount, WalletTransaction


class WalletTransactionInline(admin.TabularInline):
    model = WalletTransaction
    extra = 0
    readonly_fields = ("type", "amount", "reference", "status", "description", "created_at")
    can_delete = False


@admin.register(WalletAccount)
class WalletAccountAdmin(admin.ModelAdmin):
    list_display = ("owner_type", "owner_id", "balance", "currency", "updated_at")
    list_filter = ("owner_type",)
    search_fields = ("owner_id", "paystack_customer_code")
    readonly_fields = ("balance",)
    inlines = [WalletTransactionInline]


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ("reference", "wallet", "type", "amount", "status", "created_at")
    list_filter = ("type", "status")
    search_fields = ("reference",)


@admin.register(EarningsLedgerEntry)
class EarningsLedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "order",
        "trigger",
        "restaurant",
        "restaurant_earning",
        "platform_commission",
        "driver_earning",
        "status",
    )
    list_filter = ("trigger", "status")


@admin.register(TransferRecipient)
class TransferRecipientAdmin(admin.ModelAdmin):
    list_display = ("owner_type", "owner_id", "paystack_recipient_code")
