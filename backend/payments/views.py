"""
Order checkout endpoints.

- POST /payment/initialize            start a Paystack checkout for an order
- GET  /payment/verify/{reference}    confirm a checkout after the redirect
"""

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
import logging

from orders.serializers import OrderSerializer
from .serializers import InitializePaymentSerializer, PaymentInitializedSerializer
from .services import PaymentService

logger = logging.getLogger(__name__)


class InitializePaymentView(APIView):
    def post(self, request: Request) -> Response:
        serializer = InitializePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = PaymentService().initialize(request.user, serializer.validated_data["order_id"])
        return Response(PaymentInitializedSerializer(data).data)


class VerifyPaymentView(APIView):
    def get(self, request: Request, reference: str) -> Response:
        result = PaymentService().verify(request.user, reference)
        if "order" in result:
            result["order"] = OrderSerializer(result["order"]).data
        return Response(result)
