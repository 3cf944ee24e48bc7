import pytest

from core_backend.exceptions import UpstreamFailure


class FakePaystack:
    """Stands in for PaystackClient; records calls and can be told to fail transfers."""

    def __init__(self):
        self.calls = []
        self.fail_transfers = False

    def create_transfer_recipient(self, name, account_number, bank_code, currency="NGN"):
        self.calls.append(("create_transfer_recipient", account_number, bank_code))
        return {"recipient_code": f"RCP_{account_number}"}

    def initiate_transfer(self, amount, recipient_code, reference, reason="", currency="NGN"):
        self.calls.append(("initiate_transfer", amount, recipient_code, reference))
        if self.fail_transfers:
            raise UpstreamFailure("Payment provider request failed.")
        return {"reference": reference, "status": "pending"}

    def create_customer(self, email, first_name="", last_name="", phone=""):
        self.calls.append(("create_customer", email))
        return {"customer_code": "CUS_test123"}

    def create_dedicated_account(self, customer_code, preferred_bank=None):
        self.calls.append(("create_dedicated_account", customer_code))
        return {
            "account_number": "9930000001",
            "account_name": "FOOD/ADA OBI",
            "bank": {"name": "Wema Bank"},
        }

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def paystack():
    return FakePaystack()


@pytest.fixture
def wallet_service(paystack):
    from wallets.services import WalletService

    return WalletService(client=paystack)


@pytest.fixture
def bank_details():
    return {"account_number": "0123456789", "bank_code": "058", "account_name": "Tunde Driver"}
