from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging
import uuid

from core_backend.exceptions import Forbidden, ValidationFailed
from notifications.services import RealtimeNotifier
from orders.filters import OrderFilter
from orders.models import Order
from orders.permissions import can_view_order
from orders.serializers import OrderCreateSerializer, OrderSerializer
from orders.services import OrderService
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(StatusActionsMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """
    Orders API.

    - POST   /orders                      place an order
    - GET    /orders/{id}                 owner, assigned driver, restaurant staff
    - PATCH  /orders/{id}/status          status machine (see OrderService)
    - GET    /orders/user/{user_id}       a customer's orders
    - GET    /orders/restaurant           the staff member's restaurant orders
    """

    queryset = Order.objects.select_related("restaurant")
    serializer_class = OrderSerializer
    lookup_value_regex = "[0-9a-fA-F-]{36}"
    filterset_class = OrderFilter

    def get_serializer_class(self):
        if self.action == "create":
            return OrderCreateSerializer
        return OrderSerializer

    def get_service(self) -> OrderService:
        return OrderService(notifier=RealtimeNotifier())

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = self.get_service().create_order(
            actor=request.user,
            restaurant_id=data["restaurant_id"],
            items=data["items"],
            type=data["type"],
            schedule=data.get("schedule"),
            pickup_address=data.get("pickup_address"),
            delivery_address=data.get("delivery_address"),
            user_id=data.get("user_id"),
            gift=data.get("gift", False),
            gift_message=data.get("gift_message", ""),
            recipient_name=data.get("recipient_name", ""),
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk=None) -> Response:
        order = OrderService.get_order(pk)
        if not can_view_order(request.user, order):
            raise Forbidden("You do not have access to this order.")
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path=r"user/(?P<user_id>[0-9a-fA-F-]{36})")
    def for_user(self, request: Request, user_id=None) -> Response:
        if str(request.user.id) != str(user_id) and not request.user.is_super_role:
            raise Forbidden("You can only list your own orders.")
        return self._paginated(self.get_queryset().filter(user_id=user_id))

    @action(detail=False, methods=["get"], url_path="restaurant")
    def for_restaurant(self, request: Request) -> Response:
        user = request.user
        if user.is_super_role:
            try:
                restaurant_id = uuid.UUID(request.query_params.get("restaurant", ""))
            except ValueError:
                raise ValidationFailed("A valid restaurant query parameter is required.")
        elif user.role == user.Role.ADMIN and user.restaurant_id:
            restaurant_id = user.restaurant_id
        else:
            raise Forbidden("Only restaurant admins can list restaurant orders.")

        return self._paginated(self.get_queryset().filter(restaurant_id=restaurant_id))

    def _paginated(self, queryset) -> Response:
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(OrderSerializer(page, many=True).data)
        return Response(OrderSerializer(queryset, many=True).data)
