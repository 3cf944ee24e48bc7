"""
Earnings Ledger Tests

These tests verify that a paid order is split exactly once and that the
split never creates or loses money.

Priority: HIGH - ledger bugs are paid out as real money
"""
import pytest
from decimal import Decimal

from orders.models import Order
from wallets.models import EarningsLedgerEntry, OwnerType, WalletAccount, WalletTransaction
from wallets.tasks import accrue_restaurant_earning, post_driver_earning

S = Order.OrderStatus


@pytest.fixture
def paid_order(make_order, customer, restaurant, menu_item):
    # 2 x 10.00 -> subtotal 20.00, tax 1.00, delivery 5.00
    return make_order(
        customer, restaurant, item=menu_item, payment_status=Order.PaymentStatus.PAID
    )


def restaurant_wallet(restaurant):
    return WalletAccount.objects.get(owner_type=OwnerType.RESTAURANT, owner_id=restaurant.id)


@pytest.mark.django_db
class TestAccrual:
    def test_accrual_credits_restaurant(self, wallet_service, paid_order, restaurant):
        """
        CRITICAL: Verify the restaurant is credited subtotal + tax - commission

        20.00 subtotal, 1.00 tax, 10% commission on subtotal (2.00): 19.00
        """
        entry = wallet_service.accrue_restaurant_earning(paid_order.id)

        assert entry.trigger == EarningsLedgerEntry.Trigger.PAYMENT_CONFIRMED
        assert entry.status == EarningsLedgerEntry.EntryStatus.ACCRUED
        assert entry.platform_commission == Decimal("2.00")
        assert entry.restaurant_earning == Decimal("19.00")
        assert entry.driver_earning == Decimal("5.00")
        assert entry.restaurant_earning + entry.platform_commission == paid_order.subtotal + paid_order.tax

        wallet = restaurant_wallet(restaurant)
        assert wallet.balance == Decimal("19.00")

        tx = WalletTransaction.objects.get(reference=f"order_{paid_order.id}")
        assert tx.type == WalletTransaction.TransactionType.CREDIT
        assert tx.status == WalletTransaction.TransactionStatus.SUCCESS
        assert tx.amount == Decimal("19.00")
        assert tx.description == "Order earning"

    def test_accrual_is_idempotent(self, wallet_service, paid_order, restaurant):
        """
        CRITICAL: Verify a retried or duplicated accrual posts nothing the second time
        """
        first = wallet_service.accrue_restaurant_earning(paid_order.id)
        second = wallet_service.accrue_restaurant_earning(paid_order.id)

        assert first.id == second.id
        assert EarningsLedgerEntry.objects.filter(order=paid_order).count() == 1
        assert WalletTransaction.objects.filter(reference__startswith=f"order_{paid_order.id}").count() == 1
        assert restaurant_wallet(restaurant).balance == Decimal("19.00")

    def test_unpaid_order_is_not_accrued(self, wallet_service, delivery_order):
        assert wallet_service.accrue_restaurant_earning(delivery_order.id) is None
        assert not EarningsLedgerEntry.objects.exists()

    def test_commission_rate_comes_from_platform_settings(
        self, wallet_service, paid_order, platform_settings
    ):
        platform_settings.commission_rate = Decimal("15")
        platform_settings.save()

        entry = wallet_service.accrue_restaurant_earning(paid_order.id)
        assert entry.platform_commission == Decimal("3.00")
        assert entry.restaurant_earning == Decimal("18.00")

    def test_task_reports_result(self, paid_order):
        result = accrue_restaurant_earning.apply(args=[str(paid_order.id)]).get()
        assert result["status"] == "completed"
        assert result["restaurant_earning"] == "19.00"

    def test_task_for_missing_order(self, db):
        result = accrue_restaurant_earning.apply(args=["2b1c4d9e-0000-4000-8000-000000000000"]).get()
        assert result["status"] == "failed"


@pytest.mark.django_db
class TestDriverEarning:
    @pytest.fixture
    def delivered_order(self, make_order, customer, restaurant, driver):
        return make_order(customer, restaurant, driver=driver, status=S.DELIVERED)

    def test_driver_is_credited_the_delivery_fee(self, wallet_service, delivered_order, driver):
        entry = wallet_service.post_driver_earning(delivered_order.id)

        assert entry.trigger == EarningsLedgerEntry.Trigger.DELIVERY_COMPLETED
        assert entry.status == EarningsLedgerEntry.EntryStatus.PAID_OUT
        assert entry.driver_earning == Decimal("5.00")
        assert entry.platform_commission == Decimal("0.00")

        wallet = WalletAccount.objects.get(owner_type=OwnerType.DRIVER, owner_id=driver.id)
        assert wallet.balance == Decimal("5.00")
        tx = WalletTransaction.objects.get(reference=f"order_{delivered_order.id}_driver")
        assert tx.description == "Delivery earning"

    def test_driver_earning_is_idempotent(self, wallet_service, delivered_order, driver):
        wallet_service.post_driver_earning(delivered_order.id)
        wallet_service.post_driver_earning(delivered_order.id)

        wallet = WalletAccount.objects.get(owner_type=OwnerType.DRIVER, owner_id=driver.id)
        assert wallet.balance == Decimal("5.00")

    def test_both_triggers_coexist_for_one_order(
        self, wallet_service, make_order, customer, restaurant, driver
    ):
        order = make_order(
            customer, restaurant, driver=driver, status=S.DELIVERED,
            payment_status=Order.PaymentStatus.PAID,
        )
        wallet_service.accrue_restaurant_earning(order.id)
        wallet_service.post_driver_earning(order.id)

        assert EarningsLedgerEntry.objects.filter(order=order).count() == 2

    def test_undelivered_order_is_skipped(self, wallet_service, make_order, customer, restaurant, driver):
        order = make_order(customer, restaurant, driver=driver, status=S.PICKED_UP)
        assert wallet_service.post_driver_earning(order.id) is None

    def test_status_update_to_delivered_pays_the_driver(
        self, make_order, customer, restaurant, driver, notifier, django_capture_on_commit_callbacks
    ):
        """
        CRITICAL: Verify the delivered transition ends with the driver credited

        Celery runs eagerly in tests, so the queued task executes on commit.
        """
        from orders.services import OrderService

        order = make_order(customer, restaurant, driver=driver, status=S.PICKED_UP)
        with django_capture_on_commit_callbacks(execute=True):
            OrderService(notifier).update_status(order.id, driver, S.DELIVERED)

        wallet = WalletAccount.objects.get(owner_type=OwnerType.DRIVER, owner_id=driver.id)
        assert wallet.balance == Decimal("5.00")

    def test_task_skips_when_nothing_to_post(self, make_order, customer, restaurant):
        order = make_order(customer, restaurant, status=S.DELIVERED)
        assert post_driver_earning.apply(args=[str(order.id)]).get()["status"] == "skipped"
