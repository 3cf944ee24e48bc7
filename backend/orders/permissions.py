"""
Who may see an order and who may move it through the status machine.

Every status change, whatever endpoint or job requests it, goes through
`check_status_change` before the transition table is consulted.
"""
from core_backend.exceptions import Forbidden, InvalidTransition
from .models import Order

S = Order.OrderStatus

RESTAURANT_STATUSES = {S.ACCEPTED, S.PREPARING, S.READY_FOR_PICKUP, S.PENDING, S.REJECTED}
DRIVER_STATUSES = {S.PICKED_UP, S.DELIVERED}

# Once the kitchen has started, only a super admin can still cancel.
CANCELLABLE_STATUSES = {S.PENDING, S.SCHEDULED, S.ACCEPTED}


class SystemActor:
    """Actor used by scheduled jobs. Passes every role gate."""

    id = None
    role = "system"
    restaurant_id = None
    is_authenticated = True
    is_super_role = True
    is_driver = False
    is_customer = False

    def is_staff_of(self, restaurant_id):
        return False

    def __str__(self):
        return "system"


SYSTEM_ACTOR = SystemActor()


def _same(a, b) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def is_owner(actor, order) -> bool:
    return _same(actor.id, order.user_id)


def is_assigned_driver(actor, order) -> bool:
    return _same(actor.id, order.driver_id)


def can_view_order(actor, order) -> bool:
    if not actor or not actor.is_authenticated:
        return False
    return (
        actor.is_super_role
        or is_owner(actor, order)
        or is_assigned_driver(actor, order)
        or actor.is_staff_of(order.restaurant_id)
    )


def check_status_change(actor, order, new_status) -> None:
    """
    Raise Forbidden unless `actor` may request `new_status` for `order`.

    Checks only the role; the transition table and cancellation stage are
    enforced by OrderService.
    """
    if actor.is_super_role:
        return

    if new_status == S.CANCELLED:
        allowed = is_owner(actor, order) or actor.is_staff_of(order.restaurant_id)
    elif new_status in RESTAURANT_STATUSES:
        allowed = actor.is_staff_of(order.restaurant_id)
    elif new_status in DRIVER_STATUSES:
        allowed = is_assigned_driver(actor, order)
    else:
        allowed = False

    if not allowed:
        raise Forbidden(f"You are not allowed to set this order to {new_status}.")


def check_cancel_stage(actor, order) -> None:
    if actor.is_super_role:
        return
    if order.status not in CANCELLABLE_STATUSES:
        raise InvalidTransition(f"Order can no longer be cancelled once it is {order.status}.")
