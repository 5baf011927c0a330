"""FilterSet definitions for accommodation and room listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Accommodation, Benefit, Room


class AccommodationFilterSet(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    province = django_filters.CharFilter(field_name="province", lookup_expr="icontains")
    district = django_filters.CharFilter(field_name="district", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    people = django_filters.NumberFilter(field_name="people", lookup_expr="gte")
    # CSV of benefit ids, any of them
    benefits = django_filters.CharFilter(method="filter_benefits")

    class Meta:
        model = Accommodation
        fields = ["name", "province", "district", "type", "status"]

    def filter_benefits(self, queryset, name, value):  # type: ignore
        try:
            ids = [int(x) for x in str(value).replace(" ", "").split(",") if x]
        except ValueError:
            return queryset
        if not ids:
            return queryset
        return queryset.filter(benefits__id__in=ids).distinct()


class RoomFilterSet(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    people = django_filters.NumberFilter(field_name="people", lookup_expr="gte")

    class Meta:
        model = Room
        fields = ["accommodation", "type", "status"]


class BenefitFilterSet(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Benefit
        fields = ["name", "status"]
