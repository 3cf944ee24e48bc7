"""
Delivery Claim Tests

The claim is the one place where concurrent requests must be resolved by the
database: of N drivers accepting the same order, exactly one wins and every
other one gets 409.
"""
import threading

import pytest
from django.db import close_old_connections, connection

from core_backend.exceptions import Conflict, Forbidden, NotFound
from delivery.services import DeliveryService
from orders.models import Order

S = Order.OrderStatus


@pytest.mark.django_db
class TestAcceptOrder:
    def test_driver_claims_unassigned_order(
        self, delivery_order, driver, notifier, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order = DeliveryService(notifier).accept_order(driver.id, delivery_order.id, driver)

        assert order.driver_id == driver.id
        assert order.status == S.ACCEPTED

        rooms = notifier.rooms_for("delivery:update", "accepted")
        assert set(rooms) == {
            f"restaurant_{delivery_order.restaurant_id}",
            f"user_{delivery_order.user_id}",
            f"order_{delivery_order.id}",
        }

    def test_second_claim_conflicts(self, delivery_order, driver, other_driver, notifier):
        """
        CRITICAL: Verify a claimed order is never silently reassigned
        """
        service = DeliveryService(notifier)
        service.accept_order(driver.id, delivery_order.id, driver)

        with pytest.raises(Conflict):
            service.accept_order(other_driver.id, delivery_order.id, other_driver)

        delivery_order.refresh_from_db()
        assert delivery_order.driver_id == driver.id

    def test_cannot_claim_for_another_driver(self, delivery_order, driver, other_driver, notifier):
        with pytest.raises(Forbidden):
            DeliveryService(notifier).accept_order(driver.id, delivery_order.id, other_driver)

    def test_customer_cannot_claim_as_themselves(self, delivery_order, customer, notifier):
        with pytest.raises(Forbidden):
            DeliveryService(notifier).accept_order(customer.id, delivery_order.id, customer)

    def test_unknown_order(self, driver, notifier):
        with pytest.raises(NotFound):
            DeliveryService(notifier).accept_order(
                driver.id, "2b1c4d9e-0000-4000-8000-000000000000", driver
            )

    @pytest.mark.parametrize("status", [S.CANCELLED, S.DELIVERED, S.SCHEDULED])
    def test_unclaimable_status_conflicts(self, make_order, customer, restaurant, driver, notifier, status):
        order = make_order(customer, restaurant, status=status)
        with pytest.raises(Conflict):
            DeliveryService(notifier).accept_order(driver.id, order.id, driver)

    def test_pickup_orders_are_not_claimable(self, make_order, customer, restaurant, driver, notifier):
        order = make_order(customer, restaurant, type=Order.OrderType.PICKUP)
        with pytest.raises(Conflict):
            DeliveryService(notifier).accept_order(driver.id, order.id, driver)


@pytest.mark.django_db
class TestQueue:
    def test_queue_lists_only_claimable_deliveries(
        self, make_order, customer, restaurant, driver, delivery_order
    ):
        make_order(customer, restaurant, driver=driver, status=S.ACCEPTED)
        make_order(customer, restaurant, type=Order.OrderType.PICKUP)
        make_order(customer, restaurant, status=S.CANCELLED)

        assert list(DeliveryService.get_available_orders()) == [delivery_order]

    def test_driver_orders_exclude_delivered(self, make_order, customer, restaurant, driver):
        active = make_order(customer, restaurant, driver=driver, status=S.PICKED_UP)
        make_order(customer, restaurant, driver=driver, status=S.DELIVERED)

        assert list(DeliveryService.get_driver_orders(driver.id, driver)) == [active]

    def test_driver_orders_of_someone_else(self, driver, other_driver):
        with pytest.raises(Forbidden):
            DeliveryService.get_driver_orders(driver.id, other_driver)

    def test_admins_can_list_a_drivers_orders(
        self, make_order, customer, restaurant, driver, restaurant_admin, super_admin
    ):
        active = make_order(customer, restaurant, driver=driver, status=S.ACCEPTED)

        assert list(DeliveryService.get_driver_orders(driver.id, restaurant_admin)) == [active]
        assert list(DeliveryService.get_driver_orders(driver.id, super_admin)) == [active]

    def test_customers_cannot_list_a_drivers_orders(self, driver, customer):
        with pytest.raises(Forbidden):
            DeliveryService.get_driver_orders(driver.id, customer)


@pytest.mark.django_db
class TestDeliveryAPI:
    def test_accept_endpoint(self, auth_client, driver, delivery_order):
        response = auth_client(driver).post(
            "/api/delivery/accept",
            {"driverId": str(driver.id), "orderId": str(delivery_order.id)},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["status"] == "accepted"

    def test_losing_driver_gets_409(self, auth_client, driver, other_driver, delivery_order):
        auth_client(driver).post(
            "/api/delivery/accept",
            {"driverId": str(driver.id), "orderId": str(delivery_order.id)},
            format="json",
        )
        response = auth_client(other_driver).post(
            "/api/delivery/accept",
            {"driverId": str(other_driver.id), "orderId": str(delivery_order.id)},
            format="json",
        )
        assert response.status_code == 409
        assert response.data["kind"] == "conflict"

    def test_queue_is_for_drivers(self, auth_client, customer, driver, delivery_order):
        assert auth_client(customer).get("/api/delivery/queue").status_code == 403

        response = auth_client(driver).get("/api/delivery/queue")
        assert response.status_code == 200
        assert [o["id"] for o in response.data] == [str(delivery_order.id)]

    def test_driver_orders_endpoint(self, auth_client, driver, make_order, customer, restaurant):
        order = make_order(customer, restaurant, driver=driver, status=S.ACCEPTED)
        response = auth_client(driver).get(f"/api/delivery/driver/{driver.id}")
        assert response.status_code == 200
        assert [o["id"] for o in response.data] == [str(order.id)]


@pytest.mark.django_db(transaction=True)
class TestConcurrentClaims:
    DRIVERS = 8

    def test_exactly_one_of_many_concurrent_claims_wins(self, make_order, customer, restaurant):
        """
        CRITICAL: Verify N simultaneous claims produce one winner and N-1 conflicts

        Runs on PostgreSQL and on the file-backed SQLite test database; every
        racer must end in a result, none in "database is locked".
        """
        if connection.vendor == "sqlite" and connection.is_in_memory_db():
            pytest.skip("Threads cannot share an in-memory SQLite database")

        from users.models import User

        order = make_order(customer, restaurant)
        drivers = [
            User.objects.create_user(
                email=f"racer{i}@example.com", password="password123", role=User.Role.DRIVER
            )
            for i in range(self.DRIVERS)
        ]

        barrier = threading.Barrier(self.DRIVERS)
        results = []
        lock = threading.Lock()

        def claim(racer):
            barrier.wait()
            try:
                DeliveryService().accept_order(racer.id, order.id, racer)
                outcome = "won"
            except Conflict:
                outcome = "conflict"
            except Exception as e:
                outcome = f"error: {e!r}"
            finally:
                close_old_connections()
            with lock:
                results.append((racer.id, outcome))

        threads = [threading.Thread(target=claim, args=(racer,)) for racer in drivers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert [outcome for _, outcome in results if outcome.startswith("error")] == []
        winners = [racer_id for racer_id, outcome in results if outcome == "won"]
        assert len(winners) == 1
        assert sum(1 for _, outcome in results if outcome == "conflict") == self.DRIVERS - 1

        order.refresh_from_db()
        assert order.driver_id == winners[0]
