from django.apps import AppConfig


class GroupOrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "group_orders"
