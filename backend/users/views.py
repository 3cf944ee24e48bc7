from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .capabilities import sign_tokens
from .serializers import (
    LoginSerializer,
    SignupSerializer,
    UserSerializer,
    UserUpdateSerializer,
    VerifyOtpSerializer,
)
from .services import AccountService


class LoginView(TokenObtainPairView):
    serializer_class = LoginSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []


class RefreshView(TokenRefreshView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []


class SignupView(APIView):
    """
    Register a customer or driver account.
    No authentication required; tokens are issued for immediate login.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, tokens = AccountService.register(**serializer.validated_data)
        return Response(
            {**tokens, "user": UserSerializer(user).data, "requiresVerification": True},
            status=status.HTTP_201_CREATED,
        )


class VerifyOtpView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = VerifyOtpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AccountService.verify_email(
            serializer.validated_data["email"], serializer.validated_data["otp"]
        )
        return Response({**sign_tokens(user), "user": UserSerializer(user).data})


class CurrentUserView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({"user": UserSerializer(request.user).data})

    def patch(self, request):
        serializer = UserUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = AccountService.update_profile(request.user, **serializer.validated_data)
        return Response({"user": UserSerializer(user).data})
