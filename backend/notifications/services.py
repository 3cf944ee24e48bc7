import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

logger = logging.getLogger(__name__)


def order_room(order_id) -> str:
    return f"order_{order_id}"


def user_room(user_id) -> str:
    return f"user_{user_id}"


def restaurant_room(restaurant_id) -> str:
    return f"restaurant_{restaurant_id}"


def group_room(group_id) -> str:
    return f"group_{group_id}"


class RealtimeNotifier:
    """
    Room-scoped fan-out of domain events over the Channels layer.

    Services receive a notifier in their constructor and call `emit_on_commit`,
    so an event is only published once the database write it describes is
    durable. Delivery is best effort: a failing channel layer is logged and
    never fails the request that produced the event.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def emit(self, room: str, event: str, data: dict) -> None:
        channel_layer = self.channel_layer
        if not channel_layer:
            logger.warning(f"Channel layer not available. Dropping {event} for {room}.")
            return

        # Round-trip through JSON so UUIDs, Decimals and datetimes are plain values
        payload = json.loads(json.dumps(data, cls=DjangoJSONEncoder))
        try:
            async_to_sync(channel_layer.group_send)(
                room,
                {"type": "realtime.event", "event": event, "data": payload},
            )
            logger.debug(f"Emitted {event} ({payload.get('type')}) to {room}")
        except Exception as e:
            logger.error(f"Failed to emit {event} to {room}: {e}", exc_info=True)

    def emit_many(self, rooms, event: str, data: dict) -> None:
        for room in rooms:
            self.emit(room, event, data)

    def emit_on_commit(self, rooms, event: str, data: dict) -> None:
        if isinstance(rooms, str):
            rooms = [rooms]
        rooms = list(rooms)
        transaction.on_commit(lambda: self.emit_many(rooms, event, data))
