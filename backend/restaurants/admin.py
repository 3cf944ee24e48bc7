from django.contrib import admin

from .models import Restaurant, MenuItem, PlatformSettings


class MenuItemInline(admin.TabularInline):
    model = MenuItem
    extra = 0


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "phone_number", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    inlines = [MenuItemInline]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "restaurant", "price", "is_available")
    list_filter = ("is_available", "restaurant")
    search_fields = ("name",)


@admin.register(PlatformSettings)
class PlatformSettingsAdmin(admin.ModelAdmin):
    list_display = ("tax_rate", "delivery_fee", "commission_rate", "currency")

    def has_add_permission(self, request):
        return not PlatformSettings.objects.exists()
