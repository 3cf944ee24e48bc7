from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from notifications.services import RealtimeNotifier
from orders.serializers import OrderSerializer
from .serializers import (
    GroupAddItemSerializer,
    GroupCreateSerializer,
    GroupFinalizeSerializer,
    GroupJoinSerializer,
    GroupOrderItemSerializer,
    GroupOrderSerializer,
)
from .services import GroupOrderService

logger = logging.getLogger(__name__)


class GroupOrderViewSet(viewsets.ViewSet):
    """
    - POST /group/create
    - POST /group/join              by groupId or inviteCode
    - POST /group/add-item
    - GET  /group/{id}              members only
    - POST /group/{id}/finalize     creator only
    """

    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_service(self) -> GroupOrderService:
        return GroupOrderService(notifier=RealtimeNotifier())

    def retrieve(self, request: Request, pk=None) -> Response:
        group = self.get_service().get_group(request.user, pk)
        return Response(GroupOrderSerializer(group).data)

    @action(detail=False, methods=["post"], url_path="create")
    def create_group(self, request: Request) -> Response:
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = self.get_service().create_group(actor=request.user, **serializer.validated_data)
        return Response(GroupOrderSerializer(group).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="join")
    def join(self, request: Request) -> Response:
        serializer = GroupJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = self.get_service().join_group(actor=request.user, **serializer.validated_data)
        return Response(GroupOrderSerializer(group).data)

    @action(detail=False, methods=["post"], url_path="add-item")
    def add_item(self, request: Request) -> Response:
        serializer = GroupAddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = self.get_service().add_item(actor=request.user, **serializer.validated_data)
        return Response(
            {"message": "Item added", "entry": GroupOrderItemSerializer(entry).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="finalize")
    def finalize(self, request: Request, pk=None) -> Response:
        serializer = GroupFinalizeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self.get_service().finalize_group(
            actor=request.user, group_id=pk, **serializer.validated_data
        )
        return Response(
            {
                "message": "Group order finalized",
                "orderId": str(order.id),
                "order": OrderSerializer(order).data,
            }
        )
