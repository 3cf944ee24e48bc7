from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from notifications.services import RealtimeNotifier
from orders.serializers import OrderSerializer
from users.permissions import IsDriver, IsDriverOrSuperAdmin
from .serializers import (
    AcceptOrderSerializer,
    DriverLocationSerializer,
    LocationUpdateSerializer,
)
from .services import DeliveryService

logger = logging.getLogger(__name__)

UUID_PATTERN = "[0-9a-fA-F-]{36}"


class DeliveryViewSet(viewsets.ViewSet):
    """
    - GET  /delivery/queue                  unassigned deliveries (drivers)
    - POST /delivery/accept                 claim {driverId, orderId}
    - GET  /delivery/driver/{driver_id}     the driver's open orders
    - POST /delivery/location               {driverId, lat, lng}
    - GET  /delivery/location/{driver_id}   latest position, access-checked
    """

    def get_service(self) -> DeliveryService:
        return DeliveryService(notifier=RealtimeNotifier())

    @action(detail=False, methods=["get"], url_path="queue", permission_classes=[IsDriverOrSuperAdmin])
    def queue(self, request: Request) -> Response:
        orders = DeliveryService.get_available_orders()
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["post"], url_path="accept", permission_classes=[IsDriver])
    def accept(self, request: Request) -> Response:
        serializer = AcceptOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self.get_service().accept_order(actor=request.user, **serializer.validated_data)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path=rf"driver/(?P<driver_id>{UUID_PATTERN})")
    def driver_orders(self, request: Request, driver_id=None) -> Response:
        orders = DeliveryService.get_driver_orders(driver_id, request.user)
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["post"], url_path="location", permission_classes=[IsDriver])
    def update_location(self, request: Request) -> Response:
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.get_service().update_driver_location(actor=request.user, **serializer.validated_data)
        return Response({"message": "Location updated"})

    @action(detail=False, methods=["get"], url_path=rf"location/(?P<driver_id>{UUID_PATTERN})")
    def driver_location(self, request: Request, driver_id=None) -> Response:
        location = self.get_service().get_driver_location(driver_id, request.user)
        return Response(DriverLocationSerializer(location).data)
