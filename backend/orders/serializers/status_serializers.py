from rest_framework import serializers
from orders.models import Order


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Validates the requested status value. Whether the transition is allowed
    is decided by OrderService, not here.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
