from rest_framework import serializers

from .models import WalletAccount, WalletTransaction


class WalletAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletAccount
        fields = [
            "id",
            "owner_type",
            "owner_id",
            "balance",
            "currency",
            "paystack_customer_code",
            "paystack_virtual_account",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class WalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = [
            "id",
            "type",
            "amount",
            "reference",
            "status",
            "description",
            "meta",
            "created_at",
        ]
        read_only_fields = fields


class WithdrawSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bank_code = serializers.CharField(max_length=20)
    account_number = serializers.CharField(max_length=20)
    account_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
