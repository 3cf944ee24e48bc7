"""
Push-notification capability.

The default dispatcher only logs; deployments point PUSH_DISPATCHER at a
callable `(tokens, title, body, data)` that talks to their push provider.
"""
import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def log_dispatcher(tokens, title, body, data):
    logger.info(f"Push to {len(tokens)} device(s): {title} - {body}")


def _dispatcher():
    path = getattr(settings, "PUSH_DISPATCHER", None)
    return import_string(path) if path else log_dispatcher


def notify(user_ids, title: str, body: str, data: dict = None) -> int:
    """
    Send a push notification to every listed user with a registered device.
    Returns the number of devices targeted. Failures are logged, not raised.
    """
    from users.models import User

    tokens = list(
        User.objects.filter(id__in=list(user_ids))
        .exclude(push_token="")
        .values_list("push_token", flat=True)
    )
    if not tokens:
        return 0

    try:
        _dispatcher()(tokens, title, body, data or {})
    except Exception as e:
        logger.error(f"Push notification failed: {e}", exc_info=True)
        return 0
    return len(tokens)
