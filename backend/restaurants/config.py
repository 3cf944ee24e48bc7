"""
Centralized access to platform business parameters using the Singleton pattern.

Business logic reads tax rate, delivery fee, commission rate and currency from
`app_settings` instead of querying `PlatformSettings` directly. Values are
loaded lazily on first access and reloaded whenever the row is saved.
"""

from decimal import Decimal
from typing import Optional
from django.core.exceptions import ImproperlyConfigured
import logging

logger = logging.getLogger(__name__)


class AppSettings:
    """
    A LAZY singleton. Database loading is deferred until the first setting is
    accessed, so management commands like `migrate` can run before the table
    exists.
    """

    _instance: Optional["AppSettings"] = None

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __getattr__(self, name: str):
        # Only reached for attributes not yet in __dict__.
        if name.startswith("_"):
            raise AttributeError(name)
        if not self._initialized:
            self.load_settings()
        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        from .models import PlatformSettings

        try:
            settings_obj = PlatformSettings.load()
        except Exception as e:
            raise ImproperlyConfigured(f"Failed to load platform settings: {e}")

        self.tax_rate: Decimal = settings_obj.tax_rate
        self.delivery_fee: Decimal = settings_obj.delivery_fee
        self.commission_rate: Decimal = settings_obj.commission_rate
        self.currency: str = settings_obj.currency
        self._initialized = True
        logger.debug(
            f"Platform settings loaded: tax={self.tax_rate}% fee={self.delivery_fee} "
            f"commission={self.commission_rate}% currency={self.currency}"
        )

    def reload(self) -> None:
        for key in ("tax_rate", "delivery_fee", "commission_rate", "currency"):
            self.__dict__.pop(key, None)
        self._initialized = False


app_settings = AppSettings()
