from django.conf import settings
from django.db import models


class DriverLocation(models.Model):
    """Latest known position of a driver. One row per driver; no history."""

    driver = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="location",
    )
    lat = models.FloatField()
    lng = models.FloatField()
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.driver_id} @ ({self.lat}, {self.lng})"
