"""FilterSets for holidays and discounts.

``from_date`` / ``to_date`` query parameters arrive as DD/MM/YYYY and are
compared against the stored sortable keys.
"""

from __future__ import annotations

import django_filters  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from shared.domain.value_objects import InvalidDateFormat, comparable_date

from .models import Discount, Holiday


def _comparable(param: str, value: str) -> str:
    try:
        return comparable_date(value)
    except InvalidDateFormat as exc:
        raise ValidationError({param: str(exc)})


class DateWindowFilterSet(django_filters.FilterSet):
    from_date = django_filters.CharFilter(method="filter_from_date")
    to_date = django_filters.CharFilter(method="filter_to_date")

    def filter_from_date(self, queryset, name, value):  # type: ignore
        return queryset.filter(from_sort__gte=_comparable(name, value))

    def filter_to_date(self, queryset, name, value):  # type: ignore
        return queryset.filter(to_sort__lte=_comparable(name, value))


class HolidayFilterSet(DateWindowFilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Holiday
        fields = ["name", "price"]


class DiscountFilterSet(DateWindowFilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Discount
        fields = ["name", "status", "discount", "quantity"]
