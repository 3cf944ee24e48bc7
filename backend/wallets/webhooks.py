"""
Paystack webhook processing.

Events handled:
- charge.success      order checkout (metadata.orderId) or wallet funding
                      (metadata.owner_id, or a dedicated account's customer)
- transfer.success    settle a pending withdrawal
- transfer.failed     fail and refund a pending withdrawal
- transfer.reversed   same as transfer.failed

Every handler is guarded by the state it changes, so redelivered events are
no-ops.
"""

import hashlib
import hmac
import logging
from typing import Mapping, Optional

from django.conf import settings

from payments.money import from_minor

from .models import OwnerType, WalletAccount

logger = logging.getLogger(__name__)


def verify_signature(payload: bytes, signature: Optional[str], secret: Optional[str] = None) -> bool:
    """HMAC-SHA512 of the raw body, hex encoded, as sent in x-paystack-signature."""
    secret = settings.PAYSTACK_SECRET_KEY if secret is None else secret
    if not secret:
        return True
    if not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)


class PaystackWebhookHandler:
    def __init__(self, wallet_service=None, payment_service=None):
        from payments.services import PaymentService
        from .services import WalletService

        self.wallet_service = wallet_service or WalletService()
        self.payment_service = payment_service or PaymentService()

    def handle(self, event: Mapping) -> None:
        event_type = event.get("event")
        data = event.get("data") or {}

        if event_type == "charge.success":
            self._handle_charge_success(data)
        elif event_type == "transfer.success":
            self.wallet_service.resolve_transfer(data.get("reference"), succeeded=True)
        elif event_type in ("transfer.failed", "transfer.reversed"):
            self.wallet_service.resolve_transfer(data.get("reference"), succeeded=False)
        else:
            logger.info(f"Ignoring Paystack event {event_type}")

    def _handle_charge_success(self, data: Mapping) -> None:
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            metadata = {}
        reference = data.get("reference")
        amount_minor = data.get("amount")

        if metadata.get("orderId"):
            self.payment_service.confirm_order_payment(
                metadata["orderId"], reference=reference, amount_minor=amount_minor
            )
            return

        if amount_minor is None or not reference:
            logger.warning(f"charge.success without amount or reference: {reference}")
            return
        amount = from_minor(int(amount_minor))

        if metadata.get("owner_id"):
            self.wallet_service.credit_top_up(
                metadata.get("owner_type") or OwnerType.CUSTOMER,
                metadata["owner_id"],
                amount,
                reference,
            )
            return

        customer_code = (data.get("customer") or {}).get("customer_code")
        wallet = (
            WalletAccount.objects.filter(paystack_customer_code=customer_code).first()
            if customer_code
            else None
        )
        if wallet is None:
            logger.warning(f"charge.success {reference} matches no order or wallet")
            return
        self.wallet_service.credit_top_up(wallet.owner_type, wallet.owner_id, amount, reference)
