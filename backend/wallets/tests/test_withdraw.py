"""
Withdrawal Tests

A withdrawal reserves funds before calling the provider. Every failure path
must leave the balance exactly where it started, once.
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import InsufficientBalance, InvalidAmount, UpstreamFailure
from wallets.models import OwnerType, TransferRecipient, WalletAccount, WalletTransaction

TX = WalletTransaction.TransactionStatus


@pytest.fixture
def funded_wallet(wallet_service, driver):
    wallet_service.credit_top_up(OwnerType.DRIVER, driver.id, Decimal("100.00"), "seed_topup")
    return WalletAccount.objects.get(owner_type=OwnerType.DRIVER, owner_id=driver.id)


def balance_of(wallet):
    wallet.refresh_from_db()
    return wallet.balance


@pytest.mark.django_db
class TestWithdraw:
    def test_withdraw_reserves_funds_and_starts_transfer(
        self, wallet_service, funded_wallet, driver, bank_details, paystack
    ):
        tx = wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("40.00"), bank_details)

        assert tx.status == TX.PENDING
        assert tx.type == WalletTransaction.TransactionType.DEBIT
        assert balance_of(funded_wallet) == Decimal("60.00")

        (transfer,) = paystack.called("initiate_transfer")
        assert transfer[1] == Decimal("40.00")
        assert transfer[3] == tx.reference

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00")])
    def test_non_positive_amount(self, wallet_service, funded_wallet, driver, bank_details, amount):
        with pytest.raises(InvalidAmount):
            wallet_service.withdraw(OwnerType.DRIVER, driver.id, amount, bank_details)
        assert balance_of(funded_wallet) == Decimal("100.00")

    def test_more_than_balance(self, wallet_service, funded_wallet, driver, bank_details, paystack):
        with pytest.raises(InsufficientBalance):
            wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("100.01"), bank_details)
        assert paystack.calls == []

    def test_recipient_is_cached(self, wallet_service, funded_wallet, driver, bank_details, paystack):
        wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("10.00"), bank_details)
        wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("10.00"), bank_details)

        assert len(paystack.called("create_transfer_recipient")) == 1
        assert TransferRecipient.objects.get(owner_id=driver.id).paystack_recipient_code == "RCP_0123456789"

    def test_new_bank_account_replaces_recipient(
        self, wallet_service, funded_wallet, driver, bank_details, paystack
    ):
        wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("10.00"), bank_details)
        wallet_service.withdraw(
            OwnerType.DRIVER, driver.id, Decimal("10.00"), {**bank_details, "account_number": "9999999999"}
        )

        assert len(paystack.called("create_transfer_recipient")) == 2
        assert TransferRecipient.objects.filter(owner_id=driver.id).count() == 1

    def test_provider_failure_restores_balance(
        self, wallet_service, funded_wallet, driver, bank_details, paystack
    ):
        """
        CRITICAL: Verify a refused transfer leaves the pre-withdrawal balance
        """
        paystack.fail_transfers = True

        with pytest.raises(UpstreamFailure):
            wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("40.00"), bank_details)

        assert balance_of(funded_wallet) == Decimal("100.00")
        tx = WalletTransaction.objects.get(wallet=funded_wallet, type=WalletTransaction.TransactionType.DEBIT)
        assert tx.status == TX.FAILED


@pytest.mark.django_db
class TestResolveTransfer:
    @pytest.fixture
    def pending_tx(self, wallet_service, funded_wallet, driver, bank_details):
        return wallet_service.withdraw(OwnerType.DRIVER, driver.id, Decimal("40.00"), bank_details)

    def test_success_keeps_funds_out(self, wallet_service, funded_wallet, pending_tx):
        assert wallet_service.resolve_transfer(pending_tx.reference, succeeded=True) is True

        pending_tx.refresh_from_db()
        assert pending_tx.status == TX.SUCCESS
        assert balance_of(funded_wallet) == Decimal("60.00")

    def test_failure_refunds_once(self, wallet_service, funded_wallet, pending_tx):
        """
        CRITICAL: Verify a duplicated failure callback does not double-refund
        """
        assert wallet_service.resolve_transfer(pending_tx.reference, succeeded=False) is True
        assert wallet_service.resolve_transfer(pending_tx.reference, succeeded=False) is False

        assert balance_of(funded_wallet) == Decimal("100.00")

    def test_failure_after_success_is_ignored(self, wallet_service, funded_wallet, pending_tx):
        wallet_service.resolve_transfer(pending_tx.reference, succeeded=True)
        assert wallet_service.resolve_transfer(pending_tx.reference, succeeded=False) is False
        assert balance_of(funded_wallet) == Decimal("60.00")

    def test_unknown_reference(self, wallet_service, db):
        assert wallet_service.resolve_transfer("wd_unknown", succeeded=False) is False


@pytest.mark.django_db
class TestTopUpAndVirtualAccount:
    def test_top_up_is_credited_once(self, wallet_service, customer):
        wallet_service.credit_top_up(OwnerType.CUSTOMER, customer.id, Decimal("25.00"), "ref_1")
        assert wallet_service.credit_top_up(OwnerType.CUSTOMER, customer.id, Decimal("25.00"), "ref_1") is None

        wallet = WalletAccount.objects.get(owner_type=OwnerType.CUSTOMER, owner_id=customer.id)
        assert wallet.balance == Decimal("25.00")

    def test_setup_virtual_account(self, wallet_service, customer, paystack):
        wallet = wallet_service.setup_virtual_account(customer)

        assert wallet.paystack_customer_code == "CUS_test123"
        assert wallet.paystack_virtual_account["account_number"] == "9930000001"
        assert wallet.paystack_virtual_account["bank"] == "Wema Bank"

        wallet_service.setup_virtual_account(customer)
        assert len(paystack.called("create_customer")) == 1
        assert len(paystack.called("create_dedicated_account")) == 1

    def test_restaurant_admin_operates_restaurant_wallet(self, wallet_service, restaurant_admin, restaurant):
        wallet = wallet_service.wallet_for_user(restaurant_admin)
        assert wallet.owner_type == OwnerType.RESTAURANT
        assert wallet.owner_id == restaurant.id


@pytest.mark.django_db
class TestWalletAPI:
    def test_get_wallet(self, auth_client, driver):
        response = auth_client(driver).get("/api/wallet")
        assert response.status_code == 200
        assert response.data["owner_type"] == "driver"
        assert Decimal(response.data["balance"]) == Decimal("0.00")

    def test_transactions(self, auth_client, wallet_service, customer):
        wallet_service.credit_top_up(OwnerType.CUSTOMER, customer.id, Decimal("25.00"), "ref_api")
        response = auth_client(customer).get("/api/wallet/transactions")
        assert response.status_code == 200
        assert [tx["reference"] for tx in response.data["results"]] == ["ref_api"]

    def test_withdraw_insufficient_balance(self, auth_client, driver):
        response = auth_client(driver).post(
            "/api/wallet/withdraw",
            {"amount": "10.00", "bank_code": "058", "account_number": "0123456789"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["kind"] == "insufficient_balance"

    def test_withdraw_zero(self, auth_client, driver):
        response = auth_client(driver).post(
            "/api/wallet/withdraw",
            {"amount": "0", "bank_code": "058", "account_number": "0123456789"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["kind"] == "invalid_amount"
