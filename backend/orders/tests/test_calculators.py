"""
Pricing Tests

Pure pricing functions: no database, no settings. These numbers are what the
customer is charged and what the ledger later splits, so they are checked to
the cent.
"""
import pytest
from decimal import Decimal

from orders.calculators import (
    calculate_earnings_split,
    calculate_item_price,
    calculate_order_costs,
    calculate_subtotal,
)

ITEM = {
    "price": "10.00",
    "options": {
        "sizes": [{"id": "regular", "priceDelta": 0}, {"id": "large", "priceDelta": 2}],
        "addOns": [{"id": "chicken", "priceDelta": 1.5}, {"id": "beef", "priceDelta": 2.25}],
        "extras": [{"id": "plantain", "priceDelta": 0.5}],
    },
}


class TestItemPrice:
    def test_base_price_without_choice(self):
        assert calculate_item_price(ITEM) == Decimal("10.00")

    def test_size_add_ons_and_extras_are_summed(self):
        choice = {"sizeId": "large", "addOnIds": ["chicken", "beef"], "extraIds": ["plantain"]}
        assert calculate_item_price(ITEM, choice) == Decimal("16.25")

    def test_unknown_option_ids_add_nothing(self):
        """
        Verify ids that are not on the item are ignored rather than rejected
        """
        choice = {"sizeId": "family", "addOnIds": ["lobster"]}
        assert calculate_item_price(ITEM, choice) == Decimal("10.00")

    def test_item_without_options(self):
        assert calculate_item_price({"price": "7.50"}, {"sizeId": "large"}) == Decimal("7.50")


class TestOrderCosts:
    def test_worked_example(self):
        """
        CRITICAL: Verify the reference order prices to the cent

        10.00 item with a +2.00 size, quantity 2, 5% tax, 5.00 delivery:
        subtotal 24.00, tax 1.20, total 30.20
        """
        unit = calculate_item_price(ITEM, {"sizeId": "large"})
        costs = calculate_order_costs(
            [{"price": unit, "quantity": 2}], tax_rate=Decimal("5"), delivery_fee=Decimal("5.00")
        )

        assert costs["subtotal"] == Decimal("24.00")
        assert costs["tax"] == Decimal("1.20")
        assert costs["delivery_fee"] == Decimal("5.00")
        assert costs["total"] == Decimal("30.20")

    def test_pickup_has_no_delivery_fee(self):
        costs = calculate_order_costs([{"price": "3.00", "quantity": 3}], tax_rate=Decimal("5"))
        assert costs["delivery_fee"] == Decimal("0.00")
        assert costs["total"] == Decimal("9.45")

    def test_tax_rounds_half_up(self):
        # 5% of 0.30 is 0.015
        costs = calculate_order_costs([{"price": "0.30", "quantity": 1}], tax_rate=Decimal("5"))
        assert costs["tax"] == Decimal("0.02")

    def test_subtotal_over_several_lines(self):
        lines = [{"price": "2.50", "quantity": 2}, {"price": "1.25", "quantity": 4}]
        assert calculate_subtotal(lines) == Decimal("10.00")


class TestEarningsSplit:
    @pytest.mark.parametrize(
        "subtotal,tax,rate",
        [
            ("24.00", "1.20", "10"),
            ("33.33", "1.67", "12.5"),
            ("0.01", "0.00", "10"),
        ],
    )
    def test_restaurant_plus_commission_equals_subtotal_plus_tax(self, subtotal, tax, rate):
        """
        CRITICAL: Verify no money is created or lost in the split
        """
        split = calculate_earnings_split(
            Decimal(subtotal), Decimal(tax), Decimal("5.00"), Decimal(rate)
        )
        assert split["restaurant_earning"] + split["platform_commission"] == Decimal(subtotal) + Decimal(tax)

    def test_commission_is_taken_on_subtotal_only(self):
        split = calculate_earnings_split(
            Decimal("24.00"), Decimal("1.20"), Decimal("5.00"), Decimal("10")
        )
        assert split["platform_commission"] == Decimal("2.40")
        assert split["restaurant_earning"] == Decimal("22.80")
        assert split["driver_earning"] == Decimal("5.00")
