"""
Order pricing.

Pure functions shared by single orders and group orders: nothing here touches
the database, so the same numbers come out whether a cart is being previewed,
an order is being created or a group is being finalized.

Usage:
    from orders.calculators import calculate_item_price, calculate_order_costs

    unit_price = calculate_item_price(menu_item, {"sizeId": "lg", "addOnIds": ["cheese"]})
    costs = calculate_order_costs(line_items, tax_rate=Decimal("5"), delivery_fee=Decimal("5.00"))
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

from payments.money import ZERO, percent_of, quantize, to_decimal

OPTION_GROUPS = (
    ("sizes", "sizeId"),
    ("addOns", "addOnIds"),
    ("extras", "extraIds"),
)


def _field(source, name, default=None):
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def _selected_ids(choice: Mapping, key: str):
    value = choice.get(key)
    if value in (None, ""):
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    return [str(value)]


def calculate_item_price(item, choice: Optional[Mapping] = None) -> Decimal:
    """
    Unit price of a menu item under a customer's option selection.

    Base price plus the `priceDelta` of the chosen size and of every chosen
    add-on and extra, rounded to the cent. `item` may be a MenuItem or a dict
    with the same `price`/`options` keys. Option ids that are not on the item
    contribute nothing.
    """
    price = to_decimal(_field(item, "price", ZERO) or ZERO)
    options = _field(item, "options", None) or {}
    choice = choice or {}

    for group_key, choice_key in OPTION_GROUPS:
        wanted = _selected_ids(choice, choice_key)
        if not wanted:
            continue
        for option in options.get(group_key) or []:
            if str(option.get("id")) in wanted:
                price += to_decimal(option.get("priceDelta", 0) or 0)

    return quantize(price)


def calculate_subtotal(items: Iterable[Any]) -> Decimal:
    """Sum of unit price x quantity over line items."""
    return quantize(
        sum(
            (to_decimal(_field(i, "price", ZERO)) * int(_field(i, "quantity", 1)) for i in items),
            ZERO,
        )
    )


def calculate_order_costs(
    items: Iterable[Any],
    tax_rate: Decimal = Decimal("5"),
    delivery_fee: Decimal = ZERO,
) -> Dict[str, Decimal]:
    """
    Aggregate line items into the stored cost breakdown.

    Args:
        items: line items carrying `price` (unit) and `quantity`
        tax_rate: percentage applied to the subtotal
        delivery_fee: flat fee, 0 for pickup orders

    Returns:
        dict: {'subtotal', 'tax', 'delivery_fee', 'total'}, all quantized, with
        total == subtotal + tax + delivery_fee
    """
    subtotal = calculate_subtotal(list(items))
    tax = percent_of(subtotal, tax_rate)
    fee = quantize(delivery_fee or ZERO)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "delivery_fee": fee,
        "total": quantize(subtotal + tax + fee),
    }


def calculate_earnings_split(
    subtotal: Decimal, tax: Decimal, delivery_fee: Decimal, commission_rate: Decimal
) -> Dict[str, Decimal]:
    """
    Split a paid order between the platform, the restaurant and the driver.

    Commission is taken on the subtotal only; the restaurant keeps the rest of
    subtotal plus tax, and the driver's share is the delivery fee.
    """
    commission = percent_of(subtotal, commission_rate)
    return {
        "platform_commission": commission,
        "restaurant_earning": quantize(to_decimal(subtotal) + to_decimal(tax) - commission),
        "driver_earning": quantize(delivery_fee or ZERO),
    }
