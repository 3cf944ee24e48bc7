import logging
import secrets
import string
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core_backend.exceptions import Forbidden, NotFound, ValidationFailed
from notifications.services import RealtimeNotifier, group_room
from orders.calculators import calculate_order_costs
from orders.models import Order
from orders.services import OrderService, build_line_items, delivery_fee_for, get_restaurant
from restaurants.config import app_settings

from .models import GroupOrder, GroupOrderItem

logger = logging.getLogger(__name__)

INVITE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 6
INVITE_CODE_ATTEMPTS = 5


def make_invite_code() -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


class GroupOrderService:
    """
    Shared baskets. Members add priced entries while the group is open; the
    creator finalizes it exactly once into a single Order.
    """

    def __init__(self, notifier: Optional[RealtimeNotifier] = None):
        self.notifier = notifier or RealtimeNotifier()

    @staticmethod
    def _get_group(group_id, lock: bool = False) -> GroupOrder:
        queryset = GroupOrder.objects.select_for_update() if lock else GroupOrder.objects
        try:
            return queryset.get(id=group_id)
        except (GroupOrder.DoesNotExist, ValidationError, ValueError):
            raise NotFound("Group not found.")

    @staticmethod
    def is_member(group: GroupOrder, user) -> bool:
        return group.members.filter(id=user.id).exists()

    def get_group(self, actor, group_id) -> GroupOrder:
        group = self._get_group(group_id)
        if not (actor.is_super_role or self.is_member(group, actor)):
            raise Forbidden("Only group members can view this group.")
        return group

    def create_group(
        self,
        actor,
        restaurant_id,
        type: str = Order.OrderType.DELIVERY,
        schedule=None,
        pickup_address=None,
        delivery_address=None,
    ) -> GroupOrder:
        restaurant = get_restaurant(restaurant_id)

        if type == Order.OrderType.PICKUP:
            pickup_address = restaurant.address or None
            delivery_address = None
        else:
            pickup_address = pickup_address or restaurant.address or None

        for attempt in range(INVITE_CODE_ATTEMPTS):
            try:
                with transaction.atomic():
                    group = GroupOrder.objects.create(
                        invite_code=make_invite_code(),
                        restaurant=restaurant,
                        creator=actor,
                        type=type,
                        schedule=schedule,
                        pickup_address=pickup_address,
                        delivery_address=delivery_address,
                    )
                    group.members.add(actor)
                break
            except IntegrityError:
                logger.warning(f"Invite code collision on attempt {attempt + 1}; retrying")
        else:
            raise ValidationFailed("Could not allocate an invite code. Please retry.")

        logger.info(f"Group {group.id} ({group.invite_code}) created by {actor.id}")
        return group

    @transaction.atomic
    def join_group(self, actor, group_id=None, invite_code: Optional[str] = None) -> GroupOrder:
        if group_id:
            group = self._get_group(group_id, lock=True)
        elif invite_code:
            group = (
                GroupOrder.objects.select_for_update()
                .filter(invite_code=invite_code.strip().upper())
                .first()
            )
            if group is None:
                raise NotFound("Group not found.")
        else:
            raise ValidationFailed("groupId or inviteCode is required.")

        if not group.is_open:
            raise ValidationFailed("Group is not open.")

        if not self.is_member(group, actor):
            group.members.add(actor)
            logger.info(f"User {actor.id} joined group {group.id}")
            self.notifier.emit_on_commit(
                group_room(group.id),
                "group:update",
                {"type": "member_joined", "userId": str(actor.id)},
            )
        return group

    @transaction.atomic
    def add_item(self, actor, group_id, item_id, quantity: int = 1, choice=None) -> GroupOrderItem:
        # Lock the group so a concurrent finalize cannot miss this entry.
        group = self._get_group(group_id, lock=True)
        if not self.is_member(group, actor):
            raise Forbidden("Not a group member.")
        if not group.is_open:
            raise ValidationFailed("Group is already finalized.")

        line = build_line_items(
            group.restaurant, [{"item_id": item_id, "quantity": quantity, "choice": choice or {}}]
        )[0]
        entry = GroupOrderItem.objects.create(
            group=group,
            user=actor,
            item_id=line["item_id"],
            name=line["name"],
            quantity=line["quantity"],
            price=Decimal(line["price"]),
            choice=line["choice"],
        )

        self.notifier.emit_on_commit(
            group_room(group.id),
            "group:update",
            {"type": "item_added", "entry": entry.as_line_item()},
        )
        return entry

    @transaction.atomic
    def finalize_group(self, actor, group_id, pickup_address=None, delivery_address=None) -> Order:
        """
        Turn the group into one Order owned by the creator.

        The group row is locked and flipped open -> finalized with a
        conditional update, so two finalize requests can never both create
        an order.
        """
        group = self._get_group(group_id, lock=True)
        if str(group.creator_id) != str(actor.id):
            raise Forbidden("Only the creator can finalize the group.")
        if not group.is_open:
            raise ValidationFailed("Group already finalized.")

        entries = list(group.items.all())
        if not entries:
            raise ValidationFailed("No items in group order.")

        pickup_address = pickup_address or group.pickup_address
        delivery_address = delivery_address or group.delivery_address
        if group.type == Order.OrderType.DELIVERY and not (pickup_address and delivery_address):
            raise ValidationFailed("Delivery orders need both a pickup and a delivery address.")

        flipped = GroupOrder.objects.filter(
            id=group.id, status=GroupOrder.GroupStatus.OPEN
        ).update(status=GroupOrder.GroupStatus.FINALIZED, updated_at=timezone.now())
        if not flipped:
            raise ValidationFailed("Group already finalized.")

        line_items = [entry.as_line_item() for entry in entries]
        costs = calculate_order_costs(
            line_items,
            tax_rate=app_settings.tax_rate,
            delivery_fee=delivery_fee_for(group.type),
        )
        order = Order.objects.create(
            user_id=group.creator_id,
            restaurant_id=group.restaurant_id,
            group=group,
            items=line_items,
            type=group.type,
            status=Order.OrderStatus.SCHEDULED if group.schedule else Order.OrderStatus.PENDING,
            schedule=group.schedule,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            **costs,
        )
        logger.info(
            f"Group {group.id} finalized into order {order.id} "
            f"({len(line_items)} items, total={order.total})"
        )

        self.notifier.emit_on_commit(
            group_room(group.id),
            "group:update",
            {"type": "finalized", "orderId": str(order.id)},
        )
        OrderService(notifier=self.notifier).announce_created(order)
        return order
