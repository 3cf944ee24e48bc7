from django.urls import path, include
from rest_framework import routers
from .views import PaystackWebhookView, WalletViewSet

app_name = "wallets"

router = routers.SimpleRouter(trailing_slash=False)
router.register(r"wallet", WalletViewSet, basename="wallet")

urlpatterns = [
    # Registered ahead of the router so "webhook" is never read as a wallet action
    path("wallet/webhook", PaystackWebhookView.as_view(), name="paystack-webhook"),
    path("", include(router.urls)),
]
