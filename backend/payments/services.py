import logging
import secrets
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import Forbidden, NotFound, ValidationFailed
from notifications.services import (
    RealtimeNotifier,
    order_room,
    restaurant_room,
    user_room,
)
from orders.models import Order
from orders.permissions import is_owner

from .money import from_minor
from .paystack import PaystackClient

logger = logging.getLogger(__name__)


def queue_restaurant_accrual(order_id) -> None:
    try:
        from wallets.tasks import accrue_restaurant_earning

        accrue_restaurant_earning.delay(str(order_id))
        logger.info(f"Queued earning accrual for order {order_id}")
    except Exception as e:
        logger.error(f"Failed to queue earning accrual for order {order_id}: {e}")


class PaymentService:
    """
    Card checkout for orders through Paystack.

    The amount charged is always the order's stored total; a client-supplied
    amount is never trusted. Confirmation flips `payment_status` from pending
    to paid with a conditional update, so the verify endpoint and the webhook
    can both report the same charge without double-accruing.
    """

    def __init__(self, client: Optional[PaystackClient] = None, notifier: Optional[RealtimeNotifier] = None):
        self._client = client
        self.notifier = notifier or RealtimeNotifier()

    @property
    def client(self) -> PaystackClient:
        if self._client is None:
            self._client = PaystackClient()
        return self._client

    @staticmethod
    def _get_order(order_id) -> Order:
        try:
            return Order.objects.select_related("user").get(id=order_id)
        except (Order.DoesNotExist, ValidationError, ValueError):
            raise NotFound("Order not found.")

    def initialize(self, actor, order_id) -> dict:
        order = self._get_order(order_id)
        if not (is_owner(actor, order) or actor.is_super_role):
            raise Forbidden("You can only pay for your own orders.")
        if order.payment_status == Order.PaymentStatus.PAID:
            raise ValidationFailed("Order already paid.")

        reference = f"ord_{order.id.hex}_{secrets.token_hex(4)}"
        data = self.client.initialize_transaction(
            email=order.user.email,
            amount=order.total,
            reference=reference,
            metadata={"orderId": str(order.id), "userId": str(order.user_id)},
            callback_url=settings.PAYSTACK_CALLBACK_URL or None,
        )
        Order.objects.filter(id=order.id, payment_status=Order.PaymentStatus.PENDING).update(
            payment_reference=data.get("reference") or reference, updated_at=timezone.now()
        )
        logger.info(f"Payment {reference} initialized for order {order.id} ({order.total})")
        return {
            "authorization_url": data.get("authorization_url"),
            "access_code": data.get("access_code"),
            "reference": data.get("reference") or reference,
        }

    def verify(self, actor, reference: str) -> dict:
        """
        Ask the provider about `reference` and confirm the order it pays for.

        Only the latest checkout reference is stored on the order, so an
        earlier one is resolved through the `orderId` the provider echoes
        back in the transaction metadata.
        """
        order = Order.objects.filter(payment_reference=reference).first()
        data = None
        if order is None:
            data = self.client.verify_transaction(reference)
            metadata = data.get("metadata") or {}
            if not isinstance(metadata, dict) or not metadata.get("orderId"):
                raise NotFound("Payment not found.")
            order = self._get_order(metadata["orderId"])
        if not (is_owner(actor, order) or actor.is_super_role):
            raise Forbidden("You can only verify your own payments.")

        if data is None:
            data = self.client.verify_transaction(reference)
        if data.get("status") != "success":
            logger.info(f"Payment {reference} not successful: {data.get('status')}")
            return {"status": "failed", "message": "Payment verification failed"}

        self.confirm_order_payment(order.id, reference=reference, amount_minor=data.get("amount"))
        order.refresh_from_db()
        return {"status": "success", "order": order}

    @transaction.atomic
    def confirm_order_payment(self, order_id, reference: Optional[str] = None, amount_minor=None) -> bool:
        """
        Mark an order paid and queue the restaurant's accrual.

        Returns False when the order was already paid or the amount received
        does not cover the total.
        """
        order = self._get_order(order_id)
        if amount_minor is not None and from_minor(int(amount_minor)) < order.total:
            logger.warning(
                f"Payment for order {order.id} is short: received {from_minor(int(amount_minor))}, "
                f"expected {order.total}"
            )
            return False

        fields = {"payment_status": Order.PaymentStatus.PAID, "updated_at": timezone.now()}
        if reference:
            fields["payment_reference"] = reference
        confirmed = Order.objects.filter(
            id=order.id, payment_status=Order.PaymentStatus.PENDING
        ).update(**fields)
        if not confirmed:
            logger.info(f"Order {order.id} already paid; ignoring confirmation")
            return False

        logger.info(f"Order {order.id} paid ({reference})")
        transaction.on_commit(lambda: queue_restaurant_accrual(order.id))

        self.notifier.emit_on_commit(
            [order_room(order.id), user_room(order.user_id)],
            "payment:update",
            {"type": "success", "status": "success", "orderId": str(order.id)},
        )
        self.notifier.emit_on_commit(
            restaurant_room(order.restaurant_id),
            "orders:update",
            {"type": "paid", "orderId": str(order.id)},
        )
        return True
