"""
Orders services package.

- OrderService: order creation and the status state machine
- build_line_items: menu resolution and price snapshots, shared with group orders
"""

from .order_service import (
    OrderService,
    build_line_item,
    build_line_items,
    delivery_fee_for,
    get_restaurant,
)

__all__ = [
    "OrderService",
    "build_line_item",
    "build_line_items",
    "delivery_fee_for",
    "get_restaurant",
]
