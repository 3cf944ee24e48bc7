import logging
import secrets
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.utils import timezone

from core_backend.exceptions import Conflict, NotFound, ValidationFailed

from .capabilities import hash_secret, send_otp, sign_tokens, verify_secret
from .models import User

logger = logging.getLogger(__name__)

OTP_TTL = timedelta(minutes=10)


def generate_otp() -> str:
    return f"{100000 + secrets.randbelow(900000)}"


class AccountService:
    """
    Self-service accounts: signup, email verification and profile edits.

    Passwords and one-time codes are stored only as hashes produced by
    `hash_secret`, and checked with `verify_secret`.
    """

    SIGNUP_ROLES = (User.Role.CUSTOMER, User.Role.DRIVER)

    @staticmethod
    def register(email, password, name="", role=User.Role.CUSTOMER, phone_number=None, push_token=""):
        """
        Create an account and mail it a verification code.

        Returns (user, tokens). A second signup with the same email raises
        Conflict, including when two signups race.
        """
        email = User.objects.normalize_email(email).lower()
        if role not in AccountService.SIGNUP_ROLES:
            raise ValidationFailed("Only customer and driver accounts can sign up.")
        if User.objects.filter(email=email).exists():
            raise Conflict("Email already registered.")

        code = generate_otp()
        user = User(
            email=email,
            name=name,
            role=role,
            phone_number=phone_number,
            push_token=push_token or "",
            password=hash_secret(password),
            otp_hash=hash_secret(code),
            otp_expires_at=timezone.now() + OTP_TTL,
        )
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            raise Conflict("Email already registered.")

        logger.info(f"Account created for {email} ({role})")
        try:
            send_otp(email, code)
        except Exception as e:
            logger.error(f"Failed to send verification code to {email}: {e}")

        return user, sign_tokens(user)

    @staticmethod
    def verify_email(email, code) -> User:
        user = User.objects.filter(email=User.objects.normalize_email(email).lower()).first()
        if user is None:
            raise NotFound("User not found.")
        if user.is_verified:
            return user
        if user.otp_expires_at is None or user.otp_expires_at < timezone.now():
            raise ValidationFailed("Verification code expired.")
        if not verify_secret(code, user.otp_hash):
            raise ValidationFailed("Invalid verification code.")

        user.is_verified = True
        user.otp_hash = ""
        user.otp_expires_at = None
        user.save(update_fields=["is_verified", "otp_hash", "otp_expires_at", "updated_at"])
        logger.info(f"Email verified for {user.email}")
        return user

    @staticmethod
    def update_profile(user, **fields) -> User:
        """Apply name, phone number and push token edits to `user`."""
        for key, value in fields.items():
            setattr(user, key, value)
        if fields:
            user.save(update_fields=[*fields, "updated_at"])
        return user
