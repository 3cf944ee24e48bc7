from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "name", "phone_number", "role", "restaurant", "is_verified"]
        read_only_fields = fields


class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    name = serializers.CharField(min_length=2, max_length=150)
    role = serializers.ChoiceField(
        choices=[User.Role.CUSTOMER, User.Role.DRIVER], default=User.Role.CUSTOMER
    )
    phone_number = serializers.CharField(max_length=20, required=False, allow_null=True)
    pushToken = serializers.CharField(
        source="push_token", max_length=255, required=False, allow_blank=True
    )


class VerifyOtpSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.RegexField(r"^\d{6}$")


class UserUpdateSerializer(serializers.ModelSerializer):
    pushToken = serializers.CharField(
        source="push_token", max_length=255, required=False, allow_blank=True
    )

    class Meta:
        model = User
        fields = ["name", "phone_number", "pushToken"]


class LoginSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data
