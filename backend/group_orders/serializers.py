from rest_framework import serializers

from orders.models import Order
from orders.serializers import AddressSerializer
from orders.serializers.order_serializers import ChoiceSerializer
from .models import GroupOrder, GroupOrderItem


class GroupOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = GroupOrderItem
        fields = ["id", "user", "item_id", "name", "quantity", "price", "choice", "created_at"]
        read_only_fields = fields


class GroupOrderSerializer(serializers.ModelSerializer):
    items = GroupOrderItemSerializer(many=True, read_only=True)
    members = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    order_id = serializers.SerializerMethodField()

    class Meta:
        model = GroupOrder
        fields = [
            "id",
            "invite_code",
            "restaurant",
            "creator",
            "members",
            "status",
            "type",
            "schedule",
            "pickup_address",
            "delivery_address",
            "items",
            "order_id",
            "created_at",
        ]
        read_only_fields = fields

    def get_order_id(self, obj):
        order = getattr(obj, "order", None) if obj.status == GroupOrder.GroupStatus.FINALIZED else None
        return str(order.id) if order else None


class GroupCreateSerializer(serializers.Serializer):
    restaurantId = serializers.UUIDField(source="restaurant_id")
    type = serializers.ChoiceField(
        choices=Order.OrderType.choices, default=Order.OrderType.DELIVERY
    )
    schedule = serializers.DateTimeField(required=False, allow_null=True)
    pickupAddress = AddressSerializer(source="pickup_address", required=False, allow_null=True)
    deliveryAddress = AddressSerializer(source="delivery_address", required=False, allow_null=True)


class GroupJoinSerializer(serializers.Serializer):
    groupId = serializers.UUIDField(source="group_id", required=False)
    inviteCode = serializers.CharField(source="invite_code", min_length=4, max_length=6, required=False)

    def validate(self, attrs):
        if not attrs.get("group_id") and not attrs.get("invite_code"):
            raise serializers.ValidationError("groupId or inviteCode required")
        return attrs


class GroupAddItemSerializer(serializers.Serializer):
    groupId = serializers.UUIDField(source="group_id")
    itemId = serializers.UUIDField(source="item_id")
    quantity = serializers.IntegerField(min_value=1, default=1)
    choice = ChoiceSerializer(required=False, default=dict)


class GroupFinalizeSerializer(serializers.Serializer):
    pickupAddress = AddressSerializer(source="pickup_address", required=False, allow_null=True)
    deliveryAddress = AddressSerializer(source="delivery_address", required=False, allow_null=True)
