from rest_framework import serializers


class InitializePaymentSerializer(serializers.Serializer):
    orderId = serializers.UUIDField(source="order_id")
    # Accepted for compatibility; the order's stored total is what gets charged.
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class PaymentInitializedSerializer(serializers.Serializer):
    authorization_url = serializers.URLField(allow_null=True)
    access_code = serializers.CharField(allow_null=True)
    reference = serializers.CharField()
