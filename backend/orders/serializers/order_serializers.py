from rest_framework import serializers
from orders.models import Order


class AddressSerializer(serializers.Serializer):
    address = serializers.CharField(min_length=3)
    latitude = serializers.FloatField(required=False)
    longitude = serializers.FloatField(required=False)


class ChoiceSerializer(serializers.Serializer):
    sizeId = serializers.CharField(required=False, allow_blank=True)
    addOnIds = serializers.ListField(child=serializers.CharField(), required=False)
    extraIds = serializers.ListField(child=serializers.CharField(), required=False)


class LineItemInputSerializer(serializers.Serializer):
    itemId = serializers.UUIDField(source="item_id")
    quantity = serializers.IntegerField(min_value=1, default=1)
    choice = ChoiceSerializer(required=False, default=dict)


class OrderCreateSerializer(serializers.Serializer):
    userId = serializers.UUIDField(source="user_id", required=False)
    restaurantId = serializers.UUIDField(source="restaurant_id")
    items = LineItemInputSerializer(many=True, allow_empty=False)
    type = serializers.ChoiceField(
        choices=Order.OrderType.choices, default=Order.OrderType.DELIVERY
    )
    schedule = serializers.DateTimeField(required=False, allow_null=True)
    pickupAddress = AddressSerializer(source="pickup_address", required=False, allow_null=True)
    deliveryAddress = AddressSerializer(source="delivery_address", required=False, allow_null=True)
    gift = serializers.BooleanField(default=False)
    giftMessage = serializers.CharField(
        source="gift_message", max_length=200, required=False, allow_blank=True
    )
    recipientName = serializers.CharField(
        source="recipient_name", max_length=150, required=False, allow_blank=True
    )


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "restaurant",
            "driver",
            "group",
            "items",
            "subtotal",
            "tax",
            "delivery_fee",
            "total",
            "status",
            "payment_status",
            "type",
            "schedule",
            "pickup_address",
            "delivery_address",
            "gift",
            "gift_message",
            "recipient_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
