"""FilterSet for the user management listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Q  # type: ignore

User = get_user_model()


class UserFilterSet(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    role = django_filters.ChoiceFilter(choices=User.Role.choices)
    status = django_filters.ChoiceFilter(choices=User.Status.choices)

    class Meta:
        model = User
        fields = ["role", "status"]

    def filter_search(self, queryset, name, value):  # type: ignore
        return queryset.filter(
            Q(username__icontains=value) | Q(email__icontains=value) | Q(phone__icontains=value)
        )
