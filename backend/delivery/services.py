import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import Conflict, Forbidden, NotFound
from notifications.services import (
    RealtimeNotifier,
    order_room,
    restaurant_room,
    user_room,
)
from orders.models import Order

from .models import DriverLocation

logger = logging.getLogger(__name__)


def _same(a, b) -> bool:
    return a is not None and b is not None and str(a) == str(b)


class DeliveryService:
    """
    Driver-facing side of the order lifecycle: the claim race, the queue of
    unassigned deliveries, and live driver positions.
    """

    def __init__(self, notifier: Optional[RealtimeNotifier] = None):
        self.notifier = notifier or RealtimeNotifier()

    @staticmethod
    def get_available_orders():
        """Unassigned delivery orders a driver can still claim, oldest first."""
        return (
            Order.objects.select_related("restaurant")
            .filter(
                type=Order.OrderType.DELIVERY,
                driver__isnull=True,
                status__in=Order.CLAIMABLE_STATUSES,
            )
            .order_by("created_at")
        )

    @transaction.atomic
    def accept_order(self, driver_id, order_id, actor) -> Order:
        """
        Claim an unassigned delivery for `driver_id`.

        The claim is a single conditional UPDATE that only matches while the
        order has no driver, so of any number of concurrent claimers exactly
        one gets a row back; the rest get Conflict. The UPDATE is the first
        statement of the transaction so SQLite never has to upgrade a read
        lock into a write lock.
        """
        if not (_same(actor.id, driver_id) and actor.is_driver):
            raise Forbidden("Cannot accept orders for another driver.")

        try:
            claimed = Order.objects.filter(
                id=order_id,
                driver__isnull=True,
                type=Order.OrderType.DELIVERY,
                status__in=Order.CLAIMABLE_STATUSES,
            ).update(
                status=Order.OrderStatus.ACCEPTED,
                driver_id=driver_id,
                updated_at=timezone.now(),
            )
        except (ValidationError, ValueError):
            raise NotFound("Order not found.")

        if not claimed:
            if not Order.objects.filter(id=order_id).exists():
                raise NotFound("Order not found.")
            logger.info(f"Driver {driver_id} lost the claim on order {order_id}")
            raise Conflict("Order already accepted.")

        order = Order.objects.get(id=order_id)
        logger.info(f"Order {order.id} claimed by driver {driver_id}")

        self.notifier.emit_on_commit(
            [
                restaurant_room(order.restaurant_id),
                user_room(order.user_id),
                order_room(order.id),
            ],
            "delivery:update",
            {"type": "accepted", "orderId": str(order.id), "driverId": str(driver_id)},
        )
        return order

    @staticmethod
    def get_driver_orders(driver_id, actor):
        """The driver's orders that are not yet delivered, newest first."""
        if not (
            _same(actor.id, driver_id)
            or actor.is_super_role
            or actor.role == actor.Role.ADMIN
        ):
            raise Forbidden("You can only list your own deliveries.")
        return (
            Order.objects.select_related("restaurant")
            .filter(driver_id=driver_id)
            .exclude(status=Order.OrderStatus.DELIVERED)
            .order_by("-created_at")
        )

    def update_driver_location(self, driver_id, lat: float, lng: float, actor) -> DriverLocation:
        if not (_same(actor.id, driver_id) and actor.is_driver):
            raise Forbidden("You can only report your own location.")

        location, _ = DriverLocation.objects.update_or_create(
            driver_id=driver_id, defaults={"lat": lat, "lng": lng}
        )

        active_order_ids = Order.objects.filter(
            driver_id=driver_id, status__in=Order.ACTIVE_DELIVERY_STATUSES
        ).values_list("id", flat=True)
        payload = {"driverId": str(driver_id), "lat": lat, "lng": lng}
        for order_id in active_order_ids:
            self.notifier.emit_on_commit(order_room(order_id), "driver:location", payload)

        return location

    @staticmethod
    def can_view_driver_location(actor, driver_id) -> bool:
        if actor.is_super_role or _same(actor.id, driver_id):
            return True
        if actor.is_driver:
            return False
        if actor.role == actor.Role.ADMIN:
            return True
        # Customers only while one of their orders is live with this driver.
        return Order.objects.filter(
            user_id=actor.id,
            driver_id=driver_id,
            status__in=Order.ACTIVE_DELIVERY_STATUSES,
        ).exists()

    def get_driver_location(self, driver_id, actor) -> DriverLocation:
        if not self.can_view_driver_location(actor, driver_id):
            raise Forbidden("You cannot track this driver.")
        try:
            return DriverLocation.objects.get(driver_id=driver_id)
        except (DriverLocation.DoesNotExist, ValidationError, ValueError):
            raise NotFound("Location not found.")
