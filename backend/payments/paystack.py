import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from core_backend.exceptions import UpstreamFailure
from .money import DEFAULT_CURRENCY, to_minor

logger = logging.getLogger(__name__)


class PaystackClient:
    """
    Thin wrapper around the Paystack REST API.

    Amounts are accepted as Decimals in major units and converted to minor
    units (kobo) here. Every request carries a timeout; failures surface as
    UpstreamFailure and are never retried in-request.
    """

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None, timeout=None):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PAYSTACK_TIMEOUT

    def _get_headers(self) -> Dict[str, str]:
        if not self.secret_key:
            raise UpstreamFailure("Payment provider is not configured.")
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _make_request(self, method: str, endpoint: str, data: Dict[str, Any] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers()

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=data if data else None,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            logger.error(f"Paystack request failed: {method} {url} - {e}")
            raise UpstreamFailure("Payment provider request failed.") from e
        except ValueError as e:
            logger.error(f"Paystack returned a non-JSON body: {method} {url}")
            raise UpstreamFailure("Payment provider returned an invalid response.") from e

        if not body.get("status"):
            logger.error(f"Paystack rejected {method} {endpoint}: {body.get('message')}")
            raise UpstreamFailure(body.get("message") or "Payment provider rejected the request.")

        return body.get("data") or {}

    def initialize_transaction(self, email: str, amount, reference: str, metadata: Dict = None,
                               callback_url: Optional[str] = None,
                               currency: str = DEFAULT_CURRENCY) -> Dict[str, Any]:
        """
        Start a checkout.

        Returns:
            {"authorization_url", "access_code", "reference"}
        """
        payload = {
            "email": email,
            "amount": to_minor(amount, currency),
            "currency": currency,
            "reference": reference,
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url
        return self._make_request("POST", "/transaction/initialize", payload)

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        return self._make_request("GET", f"/transaction/verify/{reference}")

    def create_customer(self, email: str, first_name: str = "", last_name: str = "",
                        phone: str = "") -> Dict[str, Any]:
        payload = {"email": email, "first_name": first_name, "last_name": last_name}
        if phone:
            payload["phone"] = phone
        return self._make_request("POST", "/customer", payload)

    def create_dedicated_account(self, customer_code: str, preferred_bank: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "customer": customer_code,
            "preferred_bank": preferred_bank or settings.PAYSTACK_DEDICATED_ACCOUNT_BANK,
        }
        return self._make_request("POST", "/dedicated_account", payload)

    def create_transfer_recipient(self, name: str, account_number: str, bank_code: str,
                                  currency: str = DEFAULT_CURRENCY) -> Dict[str, Any]:
        payload = {
            "type": "nuban",
            "name": name,
            "account_number": account_number,
            "bank_code": bank_code,
            "currency": currency,
        }
        return self._make_request("POST", "/transferrecipient", payload)

    def initiate_transfer(self, amount, recipient_code: str, reference: str, reason: str = "",
                          currency: str = DEFAULT_CURRENCY) -> Dict[str, Any]:
        payload = {
            "source": "balance",
            "amount": to_minor(amount, currency),
            "currency": currency,
            "recipient": recipient_code,
            "reference": reference,
            "reason": reason or "Wallet withdrawal",
        }
        return self._make_request("POST", "/transfer", payload)
