import json
import logging
from datetime import datetime

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.exceptions import ValidationError

from .services import group_room, order_room, restaurant_room, user_room

logger = logging.getLogger(__name__)


class RealtimeConsumer(AsyncWebsocketConsumer):
    """
    Single realtime socket per client.

    On connect the socket joins the user's own room and, for restaurant
    admins, their restaurant's room. Order and group rooms are joined on
    request after an access check. Events published through
    `RealtimeNotifier` arrive as `{"event": ..., "data": {...}}`.
    """

    async def connect(self):
        self.user = self.scope.get("user")
        self.rooms = set()

        if not self.user or not self.user.is_authenticated:
            logger.warning("RealtimeConsumer: unauthenticated connection rejected")
            await self.close(code=4001)
            return

        await self._join(user_room(self.user.id))
        if self.user.restaurant_id and self.user.role == "admin":
            await self._join(restaurant_room(self.user.restaurant_id))

        await self.accept()
        logger.info(f"User {self.user.id} connected to realtime updates")

        await self.send_json(
            {
                "type": "connection_established",
                "rooms": sorted(self.rooms),
                "timestamp": self.get_timestamp(),
            }
        )

    async def disconnect(self, close_code):
        for room in list(getattr(self, "rooms", [])):
            await self.channel_layer.group_discard(room, self.channel_name)
        if getattr(self, "user", None) is not None and self.user.is_authenticated:
            logger.info(f"User {self.user.id} disconnected from realtime updates")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "{}")
        except json.JSONDecodeError:
            logger.error(f"Invalid JSON received from user {self.user.id}")
            await self.send_json({"type": "error", "message": "Invalid JSON"})
            return

        action = data.get("action") or data.get("type")

        if action == "ping":
            await self.send_json({"type": "pong", "timestamp": self.get_timestamp()})
        elif action in ("join", "leave"):
            await self.handle_room_request(action, data.get("room"), data.get("id"))
        else:
            logger.warning(f"Unknown message from user {self.user.id}: {action}")
            await self.send_json({"type": "error", "message": f"Unknown action: {action}"})

    async def handle_room_request(self, action, kind, target_id):
        if kind == "order":
            room = order_room(target_id)
            allowed = await self.can_view_order(target_id)
        elif kind == "group":
            room = group_room(target_id)
            allowed = await self.is_group_member(target_id)
        else:
            await self.send_json({"type": "error", "message": f"Unknown room: {kind}"})
            return

        if action == "leave":
            if room in self.rooms:
                self.rooms.discard(room)
                await self.channel_layer.group_discard(room, self.channel_name)
            await self.send_json({"type": "left", "room": room})
            return

        if not allowed:
            logger.warning(f"User {self.user.id} denied access to {room}")
            await self.send_json({"type": "error", "message": "Forbidden", "room": room})
            return

        await self._join(room)
        await self.send_json({"type": "joined", "room": room})

    @database_sync_to_async
    def can_view_order(self, order_id):
        from orders.models import Order
        from orders.permissions import can_view_order

        try:
            order = Order.objects.get(id=order_id)
        except (Order.DoesNotExist, ValidationError, ValueError, TypeError):
            return False
        return can_view_order(self.user, order)

    @database_sync_to_async
    def is_group_member(self, group_id):
        from group_orders.models import GroupOrder

        try:
            group = GroupOrder.objects.get(id=group_id)
        except (GroupOrder.DoesNotExist, ValidationError, ValueError, TypeError):
            return False
        return self.user.is_super_role or group.members.filter(id=self.user.id).exists()

    async def _join(self, room):
        await self.channel_layer.group_add(room, self.channel_name)
        self.rooms.add(room)

    # Channel layer event handlers

    async def realtime_event(self, event):
        await self.send_json({"event": event["event"], "data": event["data"]})

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content))

    def get_timestamp(self):
        return datetime.now().isoformat()
