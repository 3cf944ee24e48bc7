from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from orders.serializers import OrderSerializer, UpdateOrderStatusSerializer

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet. Authorization and
    transition rules live in OrderService; errors propagate as domain
    exceptions and are rendered by the API exception handler.
    """

    @action(detail=True, methods=["patch", "post"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        """
        Request a status change.

        Returns:
        - 200: Order in its new (or unchanged) status
        - 400: Invalid transition or stage
        - 403: Role not allowed to request this status
        - 404: Unknown order
        - 409: Status changed concurrently
        """
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self.get_service().update_status(
            order_id=pk,
            actor=request.user,
            new_status=serializer.validated_data["status"],
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        """Cancels the order (shortcut for status=cancelled)."""
        order = self.get_service().update_status(
            order_id=pk, actor=request.user, new_status="cancelled"
        )
        return Response(OrderSerializer(order).data)
