"""FilterSet for the rate listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Rate


class RateFilterSet(django_filters.FilterSet):
    accommodation_id = django_filters.NumberFilter(field_name="accommodation_id")
    star = django_filters.NumberFilter(field_name="star")

    class Meta:
        model = Rate
        fields = ["accommodation_id", "star"]
