import logging
from typing import Iterable, List, Mapping, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import (
    Conflict,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from notifications import push
from notifications.services import (
    RealtimeNotifier,
    order_room,
    restaurant_room,
    user_room,
)
from orders.calculators import calculate_item_price, calculate_order_costs
from orders.models import Order
from orders.permissions import check_cancel_stage, check_status_change
from payments.money import ZERO
from restaurants.config import app_settings
from restaurants.models import MenuItem, Restaurant

logger = logging.getLogger(__name__)


def get_restaurant(restaurant_id) -> Restaurant:
    try:
        return Restaurant.objects.get(id=restaurant_id, is_active=True)
    except (Restaurant.DoesNotExist, ValidationError, ValueError):
        raise ValidationFailed("Invalid restaurant.")


def build_line_item(menu_item: MenuItem, quantity: int, choice: Optional[Mapping] = None) -> dict:
    """Snapshot of a menu item as ordered: name and unit price are frozen here."""
    choice = dict(choice or {})
    return {
        "item_id": str(menu_item.id),
        "name": menu_item.name,
        "quantity": int(quantity),
        "price": str(calculate_item_price(menu_item, choice)),
        "choice": choice,
    }


def build_line_items(restaurant: Restaurant, requested: Iterable[Mapping]) -> List[dict]:
    """
    Resolve `[{item_id, quantity, choice}]` against the restaurant's menu.

    Raises:
        ValidationFailed: empty list, or an item that is not on this
            restaurant's menu or is currently unavailable
    """
    requested = list(requested)
    if not requested:
        raise ValidationFailed("An order needs at least one item.")

    ids = {str(entry["item_id"]) for entry in requested}
    menu = {
        str(item.id): item
        for item in MenuItem.objects.filter(restaurant=restaurant, id__in=ids)
    }

    line_items = []
    for entry in requested:
        item_id = str(entry["item_id"])
        menu_item = menu.get(item_id)
        if menu_item is None:
            raise ValidationFailed(f"Item {item_id} is not on this restaurant's menu.")
        if not menu_item.is_available:
            raise ValidationFailed(f"{menu_item.name} is currently unavailable.")
        line_items.append(
            build_line_item(menu_item, entry.get("quantity", 1), entry.get("choice"))
        )
    return line_items


def delivery_fee_for(order_type: str):
    return app_settings.delivery_fee if order_type == Order.OrderType.DELIVERY else ZERO


def queue_driver_earning(order_id) -> None:
    """Queue the driver payout for a delivered order; failures are logged only."""
    try:
        from wallets.tasks import post_driver_earning

        post_driver_earning.delay(str(order_id))
        logger.info(f"Queued driver earning for order {order_id}")
    except Exception as e:
        logger.error(f"Failed to queue driver earning for order {order_id}: {e}")


class OrderService:
    """
    Order creation and the order status state machine.

    Every status change passes three gates in order: the order must exist
    (NotFound), the actor must hold the right role for the requested status
    (Forbidden), and the transition must be in VALID_STATUS_TRANSITIONS
    (InvalidTransition). Requesting the current status again is a no-op.
    """

    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.PENDING: [
            Order.OrderStatus.ACCEPTED,
            Order.OrderStatus.REJECTED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.SCHEDULED: [
            Order.OrderStatus.PENDING,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.ACCEPTED: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.READY_FOR_PICKUP,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.READY_FOR_PICKUP,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.READY_FOR_PICKUP: [
            Order.OrderStatus.PICKED_UP,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PICKED_UP: [
            Order.OrderStatus.DELIVERED,
        ],
        Order.OrderStatus.DELIVERED: [],
        Order.OrderStatus.REJECTED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    def __init__(self, notifier: Optional[RealtimeNotifier] = None):
        self.notifier = notifier or RealtimeNotifier()

    @classmethod
    def is_valid_transition(cls, current_status: str, new_status: str) -> bool:
        return new_status in cls.VALID_STATUS_TRANSITIONS.get(current_status, [])

    @transaction.atomic
    def create_order(
        self,
        actor,
        restaurant_id,
        items: Iterable[Mapping],
        type: str = Order.OrderType.DELIVERY,
        schedule=None,
        pickup_address=None,
        delivery_address=None,
        user_id=None,
        gift: bool = False,
        gift_message: str = "",
        recipient_name: str = "",
    ) -> Order:
        """
        Price and persist a new order for `actor` (or for `user_id` when a
        super admin places it on someone's behalf).
        """
        if user_id is not None and str(user_id) != str(actor.id) and not actor.is_super_role:
            raise Forbidden("You can only place orders for yourself.")
        owner_id = user_id or actor.id

        restaurant = get_restaurant(restaurant_id)
        line_items = build_line_items(restaurant, items)

        if type == Order.OrderType.DELIVERY and not (pickup_address and delivery_address):
            raise ValidationFailed("Delivery orders need both a pickup and a delivery address.")
        if type == Order.OrderType.PICKUP and not pickup_address:
            pickup_address = restaurant.address or None

        costs = calculate_order_costs(
            line_items,
            tax_rate=app_settings.tax_rate,
            delivery_fee=delivery_fee_for(type),
        )

        order = Order.objects.create(
            user_id=owner_id,
            restaurant=restaurant,
            items=line_items,
            status=Order.OrderStatus.SCHEDULED if schedule else Order.OrderStatus.PENDING,
            type=type,
            schedule=schedule,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            gift=gift,
            gift_message=gift_message or "",
            recipient_name=recipient_name or "",
            **costs,
        )
        logger.info(
            f"Order {order.id} created for user {owner_id} at restaurant {restaurant.id}: "
            f"total={order.total} status={order.status}"
        )

        self.announce_created(order)
        return order

    def announce_created(self, order: Order) -> None:
        from orders.serializers import OrderSerializer

        self.notifier.emit_on_commit(
            [restaurant_room(order.restaurant_id), user_room(order.user_id)],
            "orders:update",
            {"type": "created", "order": OrderSerializer(order).data},
        )

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return Order.objects.get(id=order_id)
        except (Order.DoesNotExist, ValidationError, ValueError):
            raise NotFound("Order not found.")

    @transaction.atomic
    def update_status(self, order_id, actor, new_status: str) -> Order:
        """
        Move an order to `new_status`.

        Raises:
            NotFound, Forbidden, InvalidTransition, or Conflict when another
            request changed the status between our read and our write
        """
        if new_status not in Order.OrderStatus.values:
            raise InvalidTransition(f"Unknown status {new_status}.")

        order = self.get_order(order_id)
        check_status_change(actor, order, new_status)

        if order.status == new_status:
            logger.debug(f"Order {order.id} already {new_status}; nothing to do")
            return order

        if new_status == Order.OrderStatus.CANCELLED:
            check_cancel_stage(actor, order)

        if not self.is_valid_transition(order.status, new_status):
            raise InvalidTransition(
                f"Cannot transition order from {order.status} to {new_status}."
            )

        previous_status = order.status
        now = timezone.now()
        updated = Order.objects.filter(id=order.id, status=previous_status).update(
            status=new_status, updated_at=now
        )
        if not updated:
            raise Conflict("Order status was changed by another request. Reload and retry.")

        order.status = new_status
        order.updated_at = now
        logger.info(f"Order {order.id}: Status transition {previous_status} -> {new_status} by {actor}")

        self._after_status_change(order)
        return order

    def _after_status_change(self, order: Order) -> None:
        from orders.serializers import OrderSerializer

        if (
            order.status == Order.OrderStatus.DELIVERED
            and order.driver_id
            and order.delivery_fee > ZERO
        ):
            transaction.on_commit(lambda: queue_driver_earning(order.id))

        self.notifier.emit_on_commit(
            order_room(order.id),
            "orders:update",
            {"type": "status", "status": order.status, "orderId": str(order.id)},
        )
        self.notifier.emit_on_commit(
            [user_room(order.user_id), restaurant_room(order.restaurant_id)],
            "orders:update",
            {"type": "updated", "order": OrderSerializer(order).data},
        )

        status_label = Order.OrderStatus(order.status).label
        transaction.on_commit(
            lambda: push.notify(
                [order.user_id],
                "Order update",
                f"Your order is now {status_label}.",
                {"orderId": str(order.id), "status": order.status},
            )
        )

    def release_scheduled_order(self, order_id) -> Optional[Order]:
        """Move a due scheduled order to pending. Returns None if it was already moved."""
        from orders.permissions import SYSTEM_ACTOR

        try:
            return self.update_status(order_id, SYSTEM_ACTOR, Order.OrderStatus.PENDING)
        except (Conflict, InvalidTransition) as e:
            logger.info(f"Scheduled order {order_id} not released: {e}")
            return None
