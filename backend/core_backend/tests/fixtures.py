"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like restaurants, menu items, users in every role, and orders.
"""
import threading
from decimal import Decimal

import pytest
from django.db import close_old_connections, connection

from notifications.services import RealtimeNotifier
from orders.calculators import calculate_order_costs
from orders.models import Order
from restaurants.models import MenuItem, PlatformSettings, Restaurant
from users.models import User


# ============================================================================
# CONCURRENCY HELPERS
# ============================================================================

def run_concurrently(*calls):
    """
    Start every call on its own thread behind a barrier and return one outcome
    per call, in order: "ok", or the name of the exception it raised.

    Needs `django_db(transaction=True)` so the threads see committed rows.
    """
    if connection.vendor == "sqlite" and connection.is_in_memory_db():
        pytest.skip("Threads cannot share an in-memory SQLite database")

    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def run(index, call):
        barrier.wait()
        try:
            call()
            outcomes[index] = "ok"
        except Exception as e:
            outcomes[index] = type(e).__name__
        finally:
            close_old_connections()

    threads = [threading.Thread(target=run, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


# ============================================================================
# NOTIFIER FIXTURES
# ============================================================================

class RecordingNotifier(RealtimeNotifier):
    """Collects emitted events instead of publishing them."""

    def __init__(self):
        super().__init__(channel_layer=object())
        self.events = []

    def emit(self, room, event, data):
        self.events.append((room, event, data))

    def rooms_for(self, event, type_=None):
        return [
            room
            for room, name, data in self.events
            if name == event and (type_ is None or data.get("type") == type_)
        ]


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def platform_settings(db):
    """Default platform parameters: 5% tax, 5.00 delivery, 10% commission."""
    return PlatformSettings.load()


@pytest.fixture
def restaurant(db):
    return Restaurant.objects.create(
        name="Mama Put",
        address={"address": "12 Allen Avenue, Ikeja"},
        phone_number="+2348000000001",
    )


@pytest.fixture
def other_restaurant(db):
    return Restaurant.objects.create(
        name="Suya Spot",
        address={"address": "3 Admiralty Way, Lekki"},
    )


@pytest.fixture
def menu_item(restaurant):
    """10.00 item with a +2.00 large size, a +1.50 add-on and a +0.50 extra."""
    return MenuItem.objects.create(
        restaurant=restaurant,
        name="Jollof Rice",
        price=Decimal("10.00"),
        options={
            "sizes": [
                {"id": "regular", "name": "Regular", "priceDelta": 0},
                {"id": "large", "name": "Large", "priceDelta": 2.00},
            ],
            "addOns": [{"id": "chicken", "name": "Chicken", "priceDelta": 1.50}],
            "extras": [{"id": "plantain", "name": "Plantain", "priceDelta": 0.50}],
        },
    )


@pytest.fixture
def unavailable_item(restaurant):
    return MenuItem.objects.create(
        restaurant=restaurant, name="Pepper Soup", price=Decimal("7.00"), is_available=False
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email="ada@example.com", password="password123", name="Ada Obi"
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email="chidi@example.com", password="password123", name="Chidi Eze"
    )


@pytest.fixture
def driver(db):
    return User.objects.create_user(
        email="driver@example.com",
        password="password123",
        name="Tunde Driver",
        role=User.Role.DRIVER,
    )


@pytest.fixture
def other_driver(db):
    return User.objects.create_user(
        email="driver2@example.com",
        password="password123",
        name="Emeka Driver",
        role=User.Role.DRIVER,
    )


@pytest.fixture
def restaurant_admin(restaurant):
    return User.objects.create_user(
        email="manager@mamaput.com",
        password="password123",
        name="Mama Manager",
        role=User.Role.ADMIN,
        restaurant=restaurant,
    )


@pytest.fixture
def other_restaurant_admin(other_restaurant):
    return User.objects.create_user(
        email="manager@suyaspot.com",
        password="password123",
        role=User.Role.ADMIN,
        restaurant=other_restaurant,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_superuser(email="root@example.com", password="password123")


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def make_order(platform_settings):
    """
    Create an order directly, bypassing the service.

    Usage:
        order = make_order(customer, restaurant, status=Order.OrderStatus.READY_FOR_PICKUP)
    """

    def _make_order(user, restaurant, item=None, quantity=2, **overrides):
        price = item.price if item is not None else Decimal("12.00")
        line_items = [
            {
                "item_id": str(item.id) if item is not None else "00000000-0000-0000-0000-000000000000",
                "name": item.name if item is not None else "Test Item",
                "quantity": quantity,
                "price": str(price),
                "choice": {},
            }
        ]
        order_type = overrides.pop("type", Order.OrderType.DELIVERY)
        delivery_fee = Decimal("5.00") if order_type == Order.OrderType.DELIVERY else Decimal("0.00")
        costs = calculate_order_costs(line_items, tax_rate=Decimal("5"), delivery_fee=delivery_fee)
        fields = {
            "user": user,
            "restaurant": restaurant,
            "items": line_items,
            "type": order_type,
            "pickup_address": {"address": "12 Allen Avenue, Ikeja"},
            "delivery_address": {"address": "5 Bode Thomas, Surulere"}
            if order_type == Order.OrderType.DELIVERY
            else None,
            **costs,
        }
        fields.update(overrides)
        return Order.objects.create(**fields)

    return _make_order


@pytest.fixture
def delivery_order(make_order, customer, restaurant, menu_item):
    """A pending, unassigned delivery order: 2 x 10.00, tax 1.00, fee 5.00, total 26.00."""
    return make_order(customer, restaurant, item=menu_item)
