import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import (
    InsufficientBalance,
    InvalidAmount,
    NotFound,
    UpstreamFailure,
    ValidationFailed,
)
from orders.calculators import calculate_earnings_split
from orders.models import Order
from payments.money import ZERO, quantize, to_decimal
from payments.paystack import PaystackClient
from restaurants.config import app_settings

from .models import (
    EarningsLedgerEntry,
    OwnerType,
    TransferRecipient,
    WalletAccount,
    WalletTransaction,
)

logger = logging.getLogger(__name__)


def make_reference(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def parse_amount(value) -> Decimal:
    try:
        amount = quantize(to_decimal(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount("Amount must be a number.")
    if amount <= ZERO:
        raise InvalidAmount("Amount must be greater than zero.")
    return amount


def owner_for(user) -> Tuple[str, object]:
    """Which wallet the acting user operates: their restaurant's, their own driver wallet, or their customer wallet."""
    if user.role == user.Role.ADMIN and user.restaurant_id:
        return OwnerType.RESTAURANT, user.restaurant_id
    if user.is_driver:
        return OwnerType.DRIVER, user.id
    return OwnerType.CUSTOMER, user.id


class WalletService:
    """
    Ledger postings and wallet balances.

    Invariants kept here:
    - balances move only through conditional single-statement updates, and a
      debit only matches while `balance >= amount`
    - one EarningsLedgerEntry per (order, trigger), enforced by the database
    - a WalletTransaction leaves `pending` exactly once
    """

    def __init__(self, client: Optional[PaystackClient] = None):
        self._client = client

    @property
    def client(self) -> PaystackClient:
        if self._client is None:
            self._client = PaystackClient()
        return self._client

    # ------------------------------------------------------------------
    # Wallets
    # ------------------------------------------------------------------

    @staticmethod
    def ensure_wallet(owner_type: str, owner_id) -> WalletAccount:
        wallet, created = WalletAccount.objects.get_or_create(
            owner_type=owner_type,
            owner_id=owner_id,
            defaults={"currency": app_settings.currency},
        )
        if created:
            logger.info(f"Opened {owner_type} wallet for {owner_id}")
        return wallet

    def wallet_for_user(self, user) -> WalletAccount:
        return self.ensure_wallet(*owner_for(user))

    @staticmethod
    def _credit(wallet_id, amount: Decimal) -> None:
        WalletAccount.objects.filter(id=wallet_id).update(
            balance=F("balance") + amount, updated_at=timezone.now()
        )

    @staticmethod
    def _reserve(wallet_id, amount: Decimal) -> bool:
        reserved = WalletAccount.objects.filter(id=wallet_id, balance__gte=amount).update(
            balance=F("balance") - amount, updated_at=timezone.now()
        )
        return bool(reserved)

    # ------------------------------------------------------------------
    # Earnings
    # ------------------------------------------------------------------

    @transaction.atomic
    def accrue_restaurant_earning(self, order_id) -> Optional[EarningsLedgerEntry]:
        """
        Record the split for a paid order and credit the restaurant.

        Safe to call any number of times: only the first call posts.
        """
        order = self._get_order(order_id)
        if order.payment_status != Order.PaymentStatus.PAID:
            logger.warning(f"Order {order.id} is not paid; skipping earning accrual")
            return None

        split = calculate_earnings_split(
            order.subtotal, order.tax, order.delivery_fee, app_settings.commission_rate
        )
        entry, created = self._record_entry(
            order,
            EarningsLedgerEntry.Trigger.PAYMENT_CONFIRMED,
            driver_id=order.driver_id,
            status=EarningsLedgerEntry.EntryStatus.ACCRUED,
            **split,
        )
        if not created:
            logger.info(f"Earning for order {order.id} already accrued")
            return entry

        if entry.restaurant_earning > ZERO:
            wallet = self.ensure_wallet(OwnerType.RESTAURANT, order.restaurant_id)
            self._credit(wallet.id, entry.restaurant_earning)
            WalletTransaction.objects.create(
                wallet=wallet,
                type=WalletTransaction.TransactionType.CREDIT,
                amount=entry.restaurant_earning,
                reference=f"order_{order.id}",
                status=WalletTransaction.TransactionStatus.SUCCESS,
                description="Order earning",
                meta={"orderId": str(order.id), "commission": str(entry.platform_commission)},
            )
        logger.info(
            f"Accrued order {order.id}: restaurant={entry.restaurant_earning} "
            f"commission={entry.platform_commission} driver={entry.driver_earning}"
        )
        return entry

    @transaction.atomic
    def post_driver_earning(self, order_id) -> Optional[EarningsLedgerEntry]:
        """Credit the driver with the delivery fee of a delivered order, once."""
        order = self._get_order(order_id)
        if order.status != Order.OrderStatus.DELIVERED or not order.driver_id:
            logger.warning(f"Order {order.id} has no completed delivery; skipping driver earning")
            return None
        fee = quantize(order.delivery_fee or ZERO)
        if fee <= ZERO:
            return None

        entry, created = self._record_entry(
            order,
            EarningsLedgerEntry.Trigger.DELIVERY_COMPLETED,
            driver_id=order.driver_id,
            status=EarningsLedgerEntry.EntryStatus.PAID_OUT,
            platform_commission=ZERO,
            restaurant_earning=ZERO,
            driver_earning=fee,
        )
        if not created:
            logger.info(f"Driver earning for order {order.id} already posted")
            return entry

        wallet = self.ensure_wallet(OwnerType.DRIVER, order.driver_id)
        self._credit(wallet.id, fee)
        WalletTransaction.objects.create(
            wallet=wallet,
            type=WalletTransaction.TransactionType.CREDIT,
            amount=fee,
            reference=f"order_{order.id}_driver",
            status=WalletTransaction.TransactionStatus.SUCCESS,
            description="Delivery earning",
            meta={"orderId": str(order.id)},
        )
        logger.info(f"Driver {order.driver_id} earned {fee} for order {order.id}")
        return entry

    @staticmethod
    def _get_order(order_id) -> Order:
        try:
            return Order.objects.get(id=order_id)
        except Order.DoesNotExist:
            raise NotFound("Order not found.")

    @staticmethod
    def _record_entry(order: Order, trigger: str, **fields) -> Tuple[EarningsLedgerEntry, bool]:
        try:
            with transaction.atomic():
                entry = EarningsLedgerEntry.objects.create(
                    order=order,
                    restaurant_id=order.restaurant_id,
                    trigger=trigger,
                    subtotal=order.subtotal,
                    tax=order.tax,
                    delivery_fee=order.delivery_fee,
                    **fields,
                )
            return entry, True
        except IntegrityError:
            return EarningsLedgerEntry.objects.get(order=order, trigger=trigger), False

    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------

    def _get_recipient(self, owner_type: str, owner_id, bank_details: Mapping) -> TransferRecipient:
        recipient = TransferRecipient.objects.filter(owner_type=owner_type, owner_id=owner_id).first()
        if recipient and recipient.matches(bank_details):
            return recipient

        data = self.client.create_transfer_recipient(
            name=bank_details.get("account_name", ""),
            account_number=bank_details["account_number"],
            bank_code=bank_details["bank_code"],
        )
        recipient, _ = TransferRecipient.objects.update_or_create(
            owner_type=owner_type,
            owner_id=owner_id,
            defaults={
                "paystack_recipient_code": data["recipient_code"],
                "details": {
                    "account_number": str(bank_details["account_number"]),
                    "bank_code": str(bank_details["bank_code"]),
                    "account_name": bank_details.get("account_name", ""),
                },
            },
        )
        logger.info(f"Stored transfer recipient {recipient.paystack_recipient_code} for {owner_type} {owner_id}")
        return recipient

    def withdraw(self, owner_type: str, owner_id, amount, bank_details: Mapping) -> WalletTransaction:
        """
        Reserve `amount` from the wallet and pay it out to a bank account.

        Funds leave the balance before the provider is called. If the provider
        refuses the transfer, the pending debit is failed and refunded before
        UpstreamFailure is raised, so the balance ends where it started.
        """
        amount = parse_amount(amount)
        if not bank_details.get("account_number") or not bank_details.get("bank_code"):
            raise ValidationFailed("account_number and bank_code are required.")

        wallet = self.ensure_wallet(owner_type, owner_id)
        if amount > wallet.balance:
            raise InsufficientBalance("Insufficient balance.")

        recipient = self._get_recipient(owner_type, owner_id, bank_details)
        reference = make_reference("wd")

        with transaction.atomic():
            if not self._reserve(wallet.id, amount):
                raise InsufficientBalance("Insufficient balance.")
            tx = WalletTransaction.objects.create(
                wallet=wallet,
                type=WalletTransaction.TransactionType.DEBIT,
                amount=amount,
                reference=reference,
                status=WalletTransaction.TransactionStatus.PENDING,
                description="Withdrawal",
                meta={"recipient": recipient.paystack_recipient_code},
            )
        logger.info(f"Reserved {amount} from wallet {wallet.id} for withdrawal {reference}")

        try:
            self.client.initiate_transfer(
                amount, recipient.paystack_recipient_code, reference, reason="Wallet withdrawal"
            )
        except UpstreamFailure:
            logger.error(f"Transfer {reference} could not be initiated; refunding reservation")
            self.resolve_transfer(reference, succeeded=False)
            raise

        return tx

    @transaction.atomic
    def resolve_transfer(self, reference: str, succeeded: bool) -> bool:
        """
        Settle a pending withdrawal. A failure refunds the reserved amount.

        Returns False when nothing was pending under `reference`, which makes
        repeated provider callbacks harmless.
        """
        new_status = (
            WalletTransaction.TransactionStatus.SUCCESS
            if succeeded
            else WalletTransaction.TransactionStatus.FAILED
        )
        resolved = WalletTransaction.objects.filter(
            reference=reference,
            type=WalletTransaction.TransactionType.DEBIT,
            status=WalletTransaction.TransactionStatus.PENDING,
        ).update(status=new_status, updated_at=timezone.now())
        if not resolved:
            logger.info(f"Transfer {reference} has nothing pending; ignoring {new_status} callback")
            return False

        if not succeeded:
            tx = WalletTransaction.objects.get(reference=reference)
            self._credit(tx.wallet_id, tx.amount)
            logger.info(f"Refunded {tx.amount} to wallet {tx.wallet_id} for failed transfer {reference}")
        else:
            logger.info(f"Transfer {reference} succeeded")
        return True

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    @transaction.atomic
    def credit_top_up(self, owner_type: str, owner_id, amount, reference: str) -> Optional[WalletTransaction]:
        """Credit an incoming payment to a wallet. A reference is only ever credited once."""
        amount = parse_amount(amount)
        wallet = self.ensure_wallet(owner_type, owner_id)
        try:
            with transaction.atomic():
                tx = WalletTransaction.objects.create(
                    wallet=wallet,
                    type=WalletTransaction.TransactionType.CREDIT,
                    amount=amount,
                    reference=reference,
                    status=WalletTransaction.TransactionStatus.SUCCESS,
                    description="Wallet top-up",
                )
        except IntegrityError:
            logger.info(f"Top-up {reference} already credited")
            return None

        self._credit(wallet.id, amount)
        logger.info(f"Credited top-up {reference} of {amount} to wallet {wallet.id}")
        return tx

    def setup_virtual_account(self, user) -> WalletAccount:
        """Give the user's wallet a provider customer and a dedicated bank account to fund it."""
        wallet = self.wallet_for_user(user)

        if not wallet.paystack_customer_code:
            first_name, _, last_name = (user.name or "").partition(" ")
            customer = self.client.create_customer(
                email=user.email,
                first_name=first_name,
                last_name=last_name,
                phone=user.phone_number or "",
            )
            wallet.paystack_customer_code = customer["customer_code"]
            wallet.save(update_fields=["paystack_customer_code", "updated_at"])

        if not wallet.paystack_virtual_account:
            account = self.client.create_dedicated_account(wallet.paystack_customer_code)
            wallet.paystack_virtual_account = {
                "account_number": account.get("account_number"),
                "account_name": account.get("account_name"),
                "bank": (account.get("bank") or {}).get("name"),
            }
            wallet.save(update_fields=["paystack_virtual_account", "updated_at"])
            logger.info(f"Dedicated account provisioned for wallet {wallet.id}")

        return wallet
