from django.urls import path
from .views import InitializePaymentView, VerifyPaymentView

app_name = "payments"

urlpatterns = [
    path("payment/initialize", InitializePaymentView.as_view(), name="initialize"),
    path("payment/verify/<str:reference>", VerifyPaymentView.as_view(), name="verify"),
]
