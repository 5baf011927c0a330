"""Zero based page/limit pagination used by the order and invoice listings."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore
from rest_framework.pagination import BasePagination  # type: ignore
from rest_framework.response import Response  # type: ignore


def _non_negative(raw, name: str, default: int) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: "Must be an integer."}) from None
    if value < 0:
        raise ValidationError({name: "Must not be negative."})
    return value


class PageLimitPagination(BasePagination):
    """``?page=0&limit=10`` with the first page numbered 0.

    Responses look like ``{"data": [...], "pagination": {"page", "limit", "total"}}``.
    """

    page_query_param = "page"
    limit_query_param = "limit"
    max_limit = 100

    def __init__(self, default_limit: int | None = None):
        self.default_limit = default_limit or getattr(settings, "ORDER_PAGE_SIZE", 10)
        self.page = 0
        self.limit = self.default_limit
        self.total = 0

    def get_params(self, request) -> tuple[int, int]:
        page = _non_negative(request.query_params.get(self.page_query_param), "page", 0)
        limit = _non_negative(request.query_params.get(self.limit_query_param), "limit", self.default_limit)
        return page, min(limit or self.default_limit, self.max_limit)

    def paginate_queryset(self, queryset, request, view=None):  # type: ignore
        self.page, self.limit = self.get_params(request)
        self.total = queryset.count()
        start = self.page * self.limit
        return list(queryset[start:start + self.limit])

    def get_payload(self, data) -> dict:
        return {
            "data": data,
            "pagination": {"page": self.page, "limit": self.limit, "total": self.total},
        }

    def get_paginated_response(self, data):  # type: ignore
        return Response(self.get_payload(data))

    def get_paginated_response_schema(self, schema):  # type: ignore
        return {
            "type": "object",
            "properties": {
                "data": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                    },
                },
            },
        }
