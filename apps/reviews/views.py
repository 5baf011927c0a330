"""API views for accommodation rates."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.infrastructure.cache import cached, default_cache, rates_scope

from .filters import RateFilterSet
from .models import Rate
from .serializers import RateCreateSerializer, RateSerializer, RateUpdateSerializer
from .services import invalidate_rate_caches, refresh_accommodation_rating

logger = logging.getLogger(__name__)


class IsRaterOrSuperAdmin(permissions.BasePermission):
    """Only the author edits a rate; the super admin may moderate any."""

    def has_object_permission(self, request, view, obj: Rate) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return obj.user_id == user.pk or user.is_super_admin()


class RateViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Star ratings; anyone reads them, signed-in users rate once per accommodation."""

    queryset = Rate.objects.select_related("user").all()
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsRaterOrSuperAdmin]
    filterset_class = RateFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return RateCreateSerializer
        if self.action in {"update", "partial_update"}:
            return RateUpdateSerializer
        return RateSerializer

    def list(self, request, *args, **kwargs):  # type: ignore
        query = urlencode(sorted(request.query_params.items()))
        key = f"{rates_scope(request.query_params.get('accommodation_id'))}:{query}"
        data = cached(default_cache(), key, self._build_listing, settings.CATALOG_CACHE_TTL)
        return Response(data)

    def _build_listing(self) -> dict:
        page = self.paginate_queryset(self.filter_queryset(self.get_queryset()))
        data = dict(self.get_paginated_response(RateSerializer(page, many=True).data).data)
        data["results"] = list(data["results"])
        return data

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            rate = serializer.save(user=request.user)
            refresh_accommodation_rating(rate.accommodation_id)
        logger.info("User %s rated accommodation %s with %s", request.user.pk, rate.accommodation_id, rate.star)
        invalidate_rate_caches()
        return Response(RateSerializer(rate).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            rate = serializer.save()
            refresh_accommodation_rating(rate.accommodation_id)
        invalidate_rate_caches()
        return Response(RateSerializer(rate).data)
