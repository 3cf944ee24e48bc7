import json
import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    WalletAccountSerializer,
    WalletTransactionSerializer,
    WithdrawSerializer,
)
from .services import WalletService, owner_for
from .webhooks import PaystackWebhookHandler, verify_signature

logger = logging.getLogger(__name__)


class WalletViewSet(viewsets.GenericViewSet):
    """
    The acting user's wallet: the restaurant's for restaurant admins, their
    own driver or customer wallet otherwise.
    """

    def get_service(self) -> WalletService:
        return WalletService()

    def list(self, request: Request) -> Response:
        wallet = self.get_service().wallet_for_user(request.user)
        return Response(WalletAccountSerializer(wallet).data)

    @action(detail=False, methods=["get"])
    def transactions(self, request: Request) -> Response:
        wallet = self.get_service().wallet_for_user(request.user)
        queryset = wallet.transactions.order_by("-created_at")

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(WalletTransactionSerializer(page, many=True).data)
        return Response(WalletTransactionSerializer(queryset, many=True).data)

    @action(detail=False, methods=["post"])
    def withdraw(self, request: Request) -> Response:
        serializer = WithdrawSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        amount = data.pop("amount")
        data.setdefault("account_name", request.user.name)

        owner_type, owner_id = owner_for(request.user)
        tx = self.get_service().withdraw(owner_type, owner_id, amount, data)
        return Response({"status": tx.status, "reference": tx.reference})

    @action(detail=False, methods=["post"])
    def setup(self, request: Request) -> Response:
        wallet = self.get_service().setup_virtual_account(request.user)
        return Response(WalletAccountSerializer(wallet).data)


class PaystackWebhookView(APIView):
    """
    Provider callback. Always acknowledges with 200 so Paystack does not keep
    redelivering; anything that goes wrong is logged.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        payload = request.body
        signature = request.headers.get("x-paystack-signature")
        if not verify_signature(payload, signature):
            logger.warning("Paystack webhook: invalid signature")
            return Response({"ok": True})

        try:
            event = json.loads(payload or b"{}")
            logger.info(f"Paystack webhook: {event.get('event')}")
            PaystackWebhookHandler().handle(event)
        except Exception as e:
            logger.error(f"Paystack webhook processing failed: {e}", exc_info=True)

        return Response({"ok": True})
