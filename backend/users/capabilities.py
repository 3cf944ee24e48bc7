"""
Identity capabilities consumed by the rest of the backend.

Only these functions touch password hashing, token signing and OTP mail, so
the order, delivery and wallet code never depends on the concrete mechanisms.
"""
import logging

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.core.mail import send_mail
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)


def hash_secret(plain: str) -> str:
    return make_password(plain)


def verify_secret(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    return check_password(plain, hashed)


def sign_tokens(user, **claims) -> dict:
    """Issue an access/refresh pair for `user`, with optional extra claims."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    for key, value in claims.items():
        refresh[key] = value
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


def send_otp(email: str, code: str) -> None:
    send_mail(
        subject="Your verification code",
        message=f"Your verification code is {code}. It expires in 10 minutes.",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[email],
    )
    logger.info(f"OTP sent to {email}")
