from rest_framework import serializers

from .models import DriverLocation


class AcceptOrderSerializer(serializers.Serializer):
    driverId = serializers.UUIDField(source="driver_id")
    orderId = serializers.UUIDField(source="order_id")


class LocationUpdateSerializer(serializers.Serializer):
    driverId = serializers.UUIDField(source="driver_id")
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class DriverLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = DriverLocation
        fields = ["driver", "lat", "lng", "updated_at"]
        read_only_fields = fields
