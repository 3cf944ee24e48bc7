"""
Payment Service Tests

Checkout always charges the stored total, and confirmation is exactly-once no
matter how many times the provider or the client reports the same charge.
"""
import pytest
from decimal import Decimal
from unittest import mock

from core_backend.exceptions import Forbidden, NotFound, UpstreamFailure, ValidationFailed
from orders.models import Order
from payments.services import PaymentService


@pytest.fixture
def paystack():
    client = mock.Mock()
    client.initialize_transaction.side_effect = lambda **kw: {
        "authorization_url": "https://checkout.paystack.test/abc",
        "access_code": "abc",
        "reference": kw["reference"],
    }
    return client


@pytest.fixture
def service(paystack, notifier):
    return PaymentService(client=paystack, notifier=notifier)


@pytest.mark.django_db
class TestInitialize:
    def test_charges_stored_total(self, service, paystack, customer, delivery_order):
        data = service.initialize(customer, delivery_order.id)

        kwargs = paystack.initialize_transaction.call_args.kwargs
        assert kwargs["amount"] == Decimal("26.00")
        assert kwargs["metadata"]["orderId"] == str(delivery_order.id)
        assert data["authorization_url"].startswith("https://")

        delivery_order.refresh_from_db()
        assert delivery_order.payment_reference == data["reference"]

    def test_only_owner_pays(self, service, other_customer, delivery_order):
        with pytest.raises(Forbidden):
            service.initialize(other_customer, delivery_order.id)

    def test_paid_order(self, service, customer, make_order, restaurant):
        order = make_order(customer, restaurant, payment_status=Order.PaymentStatus.PAID)
        with pytest.raises(ValidationFailed):
            service.initialize(customer, order.id)

    def test_unknown_order(self, service, customer):
        with pytest.raises(NotFound):
            service.initialize(customer, "2b1c4d9e-0000-4000-8000-000000000000")

    def test_provider_failure_propagates(self, service, paystack, customer, delivery_order):
        paystack.initialize_transaction.side_effect = UpstreamFailure()
        with pytest.raises(UpstreamFailure):
            service.initialize(customer, delivery_order.id)


@pytest.mark.django_db
class TestConfirm:
    def test_confirm_is_exactly_once(
        self, service, notifier, delivery_order, django_capture_on_commit_callbacks
    ):
        """
        CRITICAL: Verify verify-endpoint and webhook racing on one charge accrue once
        """
        with mock.patch("wallets.tasks.accrue_restaurant_earning.delay") as delay:
            with django_capture_on_commit_callbacks(execute=True):
                assert service.confirm_order_payment(delivery_order.id, reference="r1") is True
                assert service.confirm_order_payment(delivery_order.id, reference="r1") is False

        delay.assert_called_once_with(str(delivery_order.id))
        assert notifier.rooms_for("payment:update", "success") == [
            f"order_{delivery_order.id}",
            f"user_{delivery_order.user_id}",
        ]
        assert notifier.rooms_for("orders:update", "paid") == [f"restaurant_{delivery_order.restaurant_id}"]

    def test_paid_order_costs_are_frozen(self, service, delivery_order):
        service.confirm_order_payment(delivery_order.id, reference="r1")
        delivery_order.refresh_from_db()

        delivery_order.total = Decimal("1.00")
        with pytest.raises(ValueError):
            delivery_order.save()


@pytest.mark.django_db
class TestVerify:
    def test_successful_verification_marks_paid(self, service, paystack, customer, delivery_order):
        Order.objects.filter(id=delivery_order.id).update(payment_reference="ref_ok")
        paystack.verify_transaction.return_value = {"status": "success", "amount": 2600}

        with mock.patch("wallets.tasks.accrue_restaurant_earning.delay"):
            result = service.verify(customer, "ref_ok")

        assert result["status"] == "success"
        assert result["order"].payment_status == Order.PaymentStatus.PAID

    def test_failed_verification(self, service, paystack, customer, delivery_order):
        Order.objects.filter(id=delivery_order.id).update(payment_reference="ref_bad")
        paystack.verify_transaction.return_value = {"status": "abandoned"}

        assert service.verify(customer, "ref_bad")["status"] == "failed"
        delivery_order.refresh_from_db()
        assert delivery_order.payment_status == Order.PaymentStatus.PENDING

    def test_unknown_reference(self, service, paystack, customer, db):
        paystack.verify_transaction.return_value = {"status": "success", "metadata": {}}
        with pytest.raises(NotFound):
            service.verify(customer, "nope")

    def test_earlier_checkout_reference_still_verifies(
        self, service, paystack, customer, delivery_order
    ):
        first = service.initialize(customer, delivery_order.id)["reference"]
        second = service.initialize(customer, delivery_order.id)["reference"]
        assert first != second
        paystack.verify_transaction.return_value = {
            "status": "success",
            "amount": 2600,
            "metadata": {"orderId": str(delivery_order.id)},
        }

        with mock.patch("wallets.tasks.accrue_restaurant_earning.delay"):
            result = service.verify(customer, first)

        assert result["status"] == "success"
        assert result["order"].payment_status == Order.PaymentStatus.PAID
        assert result["order"].payment_reference == first
        paystack.verify_transaction.assert_called_once_with(first)

    def test_earlier_reference_of_someone_elses_order(
        self, service, paystack, other_customer, delivery_order
    ):
        paystack.verify_transaction.return_value = {
            "status": "success",
            "amount": 2600,
            "metadata": {"orderId": str(delivery_order.id)},
        }
        with pytest.raises(Forbidden):
            service.verify(other_customer, "ord_old")
        delivery_order.refresh_from_db()
        assert delivery_order.payment_status == Order.PaymentStatus.PENDING

    def test_someone_elses_payment(self, service, other_customer, delivery_order):
        Order.objects.filter(id=delivery_order.id).update(payment_reference="ref_x")
        with pytest.raises(Forbidden):
            service.verify(other_customer, "ref_x")


@pytest.mark.django_db
class TestPaymentAPI:
    def test_initialize_endpoint(self, auth_client, customer, delivery_order):
        data = {"authorization_url": "https://checkout.paystack.test/x", "access_code": "x", "reference": "ref_api"}
        with mock.patch("payments.services.PaystackClient") as client_class:
            client_class.return_value.initialize_transaction.return_value = data
            response = auth_client(customer).post(
                "/api/payment/initialize", {"orderId": str(delivery_order.id)}, format="json"
            )

        assert response.status_code == 200
        assert response.data["reference"] == "ref_api"

    def test_verify_endpoint_maps_provider_outage_to_502(self, auth_client, customer, delivery_order):
        Order.objects.filter(id=delivery_order.id).update(payment_reference="ref_down")
        with mock.patch("payments.services.PaystackClient") as client_class:
            client_class.return_value.verify_transaction.side_effect = UpstreamFailure()
            response = auth_client(customer).get("/api/payment/verify/ref_down")

        assert response.status_code == 502
        assert response.data["kind"] == "upstream_failure"
