"""
Orders serializers package.
"""

from .order_serializers import (
    AddressSerializer,
    LineItemInputSerializer,
    OrderCreateSerializer,
    OrderSerializer,
)
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    "AddressSerializer",
    "LineItemInputSerializer",
    "OrderCreateSerializer",
    "OrderSerializer",
    "UpdateOrderStatusSerializer",
]
