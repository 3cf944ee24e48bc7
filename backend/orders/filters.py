import django_filters

from .models import Order


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """Comma-separated values, e.g. ?status=pending,accepted"""


class OrderFilter(django_filters.FilterSet):
    """
    Query filters for order listings.

    `status` takes one status or a comma-separated list; the date bounds
    compare against `created_at`.
    """

    status = CharInFilter(field_name="status", lookup_expr="in")
    type = django_filters.ChoiceFilter(choices=Order.OrderType.choices)
    payment_status = django_filters.ChoiceFilter(choices=Order.PaymentStatus.choices)
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "type", "payment_status", "created_after", "created_before"]
