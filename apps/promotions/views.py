"""Holiday and discount API views."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsManagerOrReadOnly
from shared.infrastructure.cache import DISCOUNTS_ALL, HOLIDAYS_ALL, cached, default_cache

from .filters import DiscountFilterSet, HolidayFilterSet
from .models import Discount, Holiday
from .serializers import (
    BulkDeleteSerializer,
    DiscountAssignSerializer,
    DiscountSerializer,
    DiscountStatusSerializer,
    HolidaySerializer,
)
from .services import assign_discount, expire_discounts, invalidate_discount_cache, invalidate_holiday_cache


class CachedListMixin:
    """Serve the unfiltered list from the cache; filtered lists hit the database."""

    cache_key: str = ""

    def list(self, request, *args, **kwargs):  # type: ignore
        if request.query_params:
            return super().list(request, *args, **kwargs)  # type: ignore[misc]

        def build() -> list:
            queryset = self.get_queryset()  # type: ignore[attr-defined]
            return list(self.get_serializer(queryset, many=True).data)  # type: ignore[attr-defined]

        return Response(cached(default_cache(), self.cache_key, build, settings.CATALOG_CACHE_TTL))


class HolidayViewSet(CachedListMixin, viewsets.ModelViewSet):
    queryset = Holiday.objects.all()
    serializer_class = HolidaySerializer
    permission_classes = [IsManagerOrReadOnly]
    filter_backends = [DjangoFilterBackend]
    filterset_class = HolidayFilterSet
    pagination_class = None
    cache_key = HOLIDAYS_ALL

    def perform_create(self, serializer):  # type: ignore
        serializer.save()
        invalidate_holiday_cache()

    def perform_update(self, serializer):  # type: ignore
        serializer.save()
        invalidate_holiday_cache()

    def perform_destroy(self, instance):  # type: ignore
        instance.delete()
        invalidate_holiday_cache()

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):  # type: ignore
        serializer = BulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted, _ = Holiday.objects.filter(pk__in=serializer.validated_data["ids"]).delete()
        invalidate_holiday_cache()
        return Response({"deleted": deleted}, status=status.HTTP_200_OK)


class DiscountViewSet(CachedListMixin, viewsets.ModelViewSet):
    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    permission_classes = [IsManagerOrReadOnly]
    filter_backends = [DjangoFilterBackend]
    filterset_class = DiscountFilterSet
    pagination_class = None
    cache_key = DISCOUNTS_ALL

    def list(self, request, *args, **kwargs):  # type: ignore
        expire_discounts()
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):  # type: ignore
        serializer.save()
        invalidate_discount_cache()

    def perform_update(self, serializer):  # type: ignore
        serializer.save()
        invalidate_discount_cache()

    def perform_destroy(self, instance):  # type: ignore
        instance.delete()
        invalidate_discount_cache()

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        discount = self.get_object()
        serializer = DiscountStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        discount.status = serializer.validated_data["status"]
        discount.save(update_fields=["status", "updated_at"])
        invalidate_discount_cache()
        return Response(DiscountSerializer(discount).data)

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):  # type: ignore
        discount = self.get_object()
        serializer = DiscountAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = assign_discount(discount, serializer.validated_data["user_ids"])
        return Response({"assigned": created}, status=status.HTTP_200_OK)
