from celery import shared_task
import logging

from core_backend.exceptions import NotFound

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def accrue_restaurant_earning(self, order_id):
    """
    Post the restaurant's share of a paid order.

    Queued after the payment confirmation commits. Repeated runs are harmless:
    the ledger accepts one entry per order and trigger.

    Returns:
        dict: Status and the accrued amounts
    """
    from .services import WalletService

    try:
        entry = WalletService().accrue_restaurant_earning(order_id)
        if entry is None:
            return {"status": "skipped", "order_id": str(order_id)}
        return {
            "status": "completed",
            "order_id": str(order_id),
            "restaurant_earning": str(entry.restaurant_earning),
            "platform_commission": str(entry.platform_commission),
        }
    except NotFound:
        logger.error(f"Order {order_id} not found for earning accrual")
        return {"status": "failed", "error": "Order not found", "order_id": str(order_id)}
    except Exception as exc:
        logger.error(f"Error accruing earning for order {order_id}: {exc}")
        raise self.retry(exc=exc)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def post_driver_earning(self, order_id):
    """Credit the driver's wallet with the delivery fee once the order is delivered."""
    from .services import WalletService

    try:
        entry = WalletService().post_driver_earning(order_id)
        if entry is None:
            return {"status": "skipped", "order_id": str(order_id)}
        return {
            "status": "completed",
            "order_id": str(order_id),
            "driver_earning": str(entry.driver_earning),
        }
    except NotFound:
        logger.error(f"Order {order_id} not found for driver earning")
        return {"status": "failed", "error": "Order not found", "order_id": str(order_id)}
    except Exception as exc:
        logger.error(f"Error posting driver earning for order {order_id}: {exc}")
        raise self.retry(exc=exc)
