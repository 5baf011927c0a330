"""Query filters for the order listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from shared.domain.value_objects import InvalidDateFormat, parse_wire_date

from .models import Order


def _wire_date(param: str, value: str):
    try:
        return parse_wire_date(value)
    except InvalidDateFormat as exc:
        raise ValidationError({param: str(exc)})


class OrderFilterSet(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="accommodation__name", lookup_expr="icontains")
    phone = django_filters.CharFilter(method="filter_phone")
    price = django_filters.NumberFilter(field_name="total_price", lookup_expr="gte")
    status = django_filters.NumberFilter(field_name="status")
    from_date = django_filters.CharFilter(method="filter_from_date")
    to_date = django_filters.CharFilter(method="filter_to_date")

    class Meta:
        model = Order
        fields = ["name", "phone", "price", "status", "from_date", "to_date"]

    def filter_phone(self, queryset, name, value):  # type: ignore
        return queryset.filter(Q(user__phone__icontains=value) | Q(guest_phone__icontains=value))

    def filter_from_date(self, queryset, name, value):  # type: ignore
        return queryset.filter(created_at__date__gte=_wire_date(name, value))

    def filter_to_date(self, queryset, name, value):  # type: ignore
        return queryset.filter(updated_at__date__lte=_wire_date(name, value))
