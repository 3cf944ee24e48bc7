import uuid

from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError(_("The given email must be set"))
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user."""
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        """Create and save a superuser."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", self.model.Role.SUPER_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError(_("Superuser must have is_staff=True."))
        if extra_fields.get("is_superuser") is not True:
            raise ValueError(_("Superuser must have is_superuser=True."))

        return self._create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        DRIVER = "driver", _("Driver")
        ADMIN = "admin", _("Restaurant Admin")
        SUPER_ADMIN = "super_admin", _("Super Admin")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_("email address"), unique=True)
    name = models.CharField(_("name"), max_length=150, blank=True)
    phone_number = models.CharField(
        _("phone number"), max_length=20, blank=True, null=True
    )

    role = models.CharField(
        _("role"), max_length=20, choices=Role.choices, default=Role.CUSTOMER
    )

    # Restaurant staff belong to exactly one restaurant.
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff",
        help_text=_("The restaurant this admin manages."),
    )

    # Device token for push notifications.
    push_token = models.CharField(_("push token"), max_length=255, blank=True)

    # Email ownership, proven by the one-time code mailed at signup.
    is_verified = models.BooleanField(_("verified"), default=False)
    otp_hash = models.CharField(max_length=128, blank=True)
    otp_expires_at = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(_("active"), default=True)
    is_staff = models.BooleanField(
        _("staff status"),
        default=False,
        help_text=_("Designates whether the user can log into this admin site."),
    )
    date_joined = models.DateTimeField(_("date joined"), default=timezone.now)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        indexes = [
            models.Index(fields=["role", "is_active"], name="user_role_active_idx"),
            models.Index(fields=["restaurant", "role"], name="user_restaurant_role_idx"),
        ]

    def __str__(self):
        return self.email

    @property
    def is_super_role(self) -> bool:
        return self.role == self.Role.SUPER_ADMIN or self.is_superuser

    @property
    def is_driver(self) -> bool:
        return self.role == self.Role.DRIVER

    @property
    def is_customer(self) -> bool:
        return self.role == self.Role.CUSTOMER

    def is_staff_of(self, restaurant_id) -> bool:
        """True for a restaurant admin attached to the given restaurant."""
        return (
            self.role == self.Role.ADMIN
            and self.restaurant_id is not None
            and str(self.restaurant_id) == str(restaurant_id)
        )
