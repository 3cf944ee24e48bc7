from django.db.models.signals import post_save
from django.dispatch import receiver

from .config import app_settings
from .models import PlatformSettings


@receiver(post_save, sender=PlatformSettings)
def reload_platform_settings(sender, instance, **kwargs):
    app_settings.reload()
