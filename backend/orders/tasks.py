from celery import shared_task
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


@shared_task
def release_due_scheduled_orders():
    """
    Periodic task: move scheduled orders whose time has come to pending.

    Each order goes through the regular state machine, so restaurants get the
    same realtime events as for a fresh order.
    """
    from orders.models import Order
    from orders.services import OrderService

    due_ids = list(
        Order.objects.filter(
            status=Order.OrderStatus.SCHEDULED, schedule__lte=timezone.now()
        ).values_list("id", flat=True)
    )
    if not due_ids:
        return {"status": "completed", "released": 0}

    service = OrderService()
    released = 0
    for order_id in due_ids:
        if service.release_scheduled_order(order_id) is not None:
            released += 1

    logger.info(f"Released {released} of {len(due_ids)} due scheduled orders")
    return {"status": "completed", "released": released}
