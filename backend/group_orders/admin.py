from django.contrib import admin
from .models import GroupOrder, GroupOrderItem


class GroupOrderItemInline(admin.TabularInline):
    model = GroupOrderItem
    extra = 0
    readonly_fields = ("user", "item_id", "name", "quantity", "price", "choice")
    can_delete = False


@admin.register(GroupOrder)
class GroupOrderAdmin(admin.ModelAdmin):
    list_display = ("invite_code", "restaurant", "creator", "status", "type", "created_at")
    list_filter = ("status", "type")
    search_fields = ("invite_code", "creator__email")
    inlines = [GroupOrderItemInline]
