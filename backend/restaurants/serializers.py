from rest_framework import serializers

from .models import Restaurant, MenuItem


class RestaurantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Restaurant
        fields = ["id", "name", "address", "phone_number", "is_active"]
        read_only_fields = fields


class MenuItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = [
            "id",
            "restaurant",
            "name",
            "description",
            "price",
            "is_available",
            "options",
        ]
        read_only_fields = fields
