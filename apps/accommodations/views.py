"""Accommodation, room and benefit API views."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings  # type: ignore
from django.db.models import ProtectedError  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsManagerOrReadOnly
from shared.infrastructure.cache import ACCOMMODATIONS_PREFIX, BENEFITS_ALL, cached, default_cache

from .filters import AccommodationFilterSet, BenefitFilterSet, RoomFilterSet
from .models import Accommodation, Benefit, Room, VisibilityStatus
from .serializers import (
    AccommodationDetailSerializer,
    AccommodationSerializer,
    BenefitSerializer,
    RoomSerializer,
    StatusSerializer,
)
from .services import (
    accommodations_visible_to,
    can_manage,
    fill_coordinates,
    invalidate_accommodation_cache,
    invalidate_benefit_cache,
)

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("address", "ward", "district", "province")


class StillBooked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This listing has bookings and cannot be deleted; hide it instead."
    default_code = "still_booked"


def _delete_unbooked(instance) -> None:
    try:
        instance.delete()
    except ProtectedError as exc:
        logger.warning("Refused to delete %s %s: %s", type(instance).__name__, instance.pk, exc)
        raise StillBooked() from exc


class IsAccommodationManager(permissions.BasePermission):
    """Writes are limited to the owning admin and the super admin."""

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        accommodation = obj.accommodation if isinstance(obj, Room) else obj
        return can_manage(request.user, accommodation)


def _scope_label(user) -> str:
    if not user.is_authenticated:
        return "public"
    if user.is_super_admin():
        return "all"
    owner_id = user.owner_scope_id()
    return f"owner={owner_id}" if owner_id is not None else "public"


class AccommodationViewSet(viewsets.ModelViewSet):
    """Accommodations with a cached, filterable listing."""

    queryset = Accommodation.objects.select_related("owner").prefetch_related("benefits", "rooms")
    serializer_class = AccommodationSerializer
    permission_classes = [IsManagerOrReadOnly, IsAccommodationManager]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = AccommodationFilterSet
    ordering_fields = ["price", "created_at", "updated_at", "people"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.action == "retrieve":
            qs = qs.prefetch_related("rates__user")
        return accommodations_visible_to(self.request.user, qs)

    def get_serializer_class(self):  # type: ignore
        if self.action == "retrieve":
            return AccommodationDetailSerializer
        return AccommodationSerializer

    def list(self, request, *args, **kwargs):  # type: ignore
        query = urlencode(sorted(request.query_params.items()))
        key = f"{ACCOMMODATIONS_PREFIX}{_scope_label(request.user)}:{query}"
        data = cached(default_cache(), key, self._build_listing, settings.CATALOG_CACHE_TTL)
        return Response(data)

    def _build_listing(self) -> dict:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is None:
            return {"count": len(queryset), "results": list(self.get_serializer(queryset, many=True).data)}
        response = self.get_paginated_response(self.get_serializer(page, many=True).data)
        data = dict(response.data)
        data["results"] = list(data["results"])
        return data

    def perform_create(self, serializer):  # type: ignore
        accommodation = serializer.save(owner=self.request.user)
        if fill_coordinates(accommodation):
            accommodation.save(update_fields=["longitude", "latitude"])
        logger.info("Accommodation %s created by user %s", accommodation.pk, self.request.user.pk)
        invalidate_accommodation_cache()

    def perform_update(self, serializer):  # type: ignore
        address_changed = any(
            field in serializer.validated_data
            and serializer.validated_data[field] != getattr(serializer.instance, field)
            for field in ADDRESS_FIELDS
        )
        coordinates_given = "longitude" in serializer.validated_data or "latitude" in serializer.validated_data
        accommodation = serializer.save()
        if address_changed and not coordinates_given:
            accommodation.longitude = None
            accommodation.latitude = None
            fill_coordinates(accommodation)
            accommodation.save(update_fields=["longitude", "latitude"])
        invalidate_accommodation_cache()

    def perform_destroy(self, instance):  # type: ignore
        _delete_unbooked(instance)
        invalidate_accommodation_cache()

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        accommodation = self.get_object()
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        accommodation.status = serializer.validated_data["status"]
        accommodation.save(update_fields=["status", "updated_at"])
        invalidate_accommodation_cache()
        return Response(AccommodationSerializer(accommodation).data)


class RoomViewSet(viewsets.ModelViewSet):
    queryset = Room.objects.select_related("accommodation").prefetch_related("benefits")
    serializer_class = RoomSerializer
    permission_classes = [IsManagerOrReadOnly, IsAccommodationManager]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = RoomFilterSet
    ordering_fields = ["price", "people", "created_at"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        visible = accommodations_visible_to(user)
        qs = qs.filter(accommodation__in=visible)
        if not user.is_authenticated or (user.owner_scope_id() is None and not user.is_super_admin()):
            qs = qs.filter(status=VisibilityStatus.ACTIVE)
        return qs

    def perform_create(self, serializer):  # type: ignore
        serializer.save()
        invalidate_accommodation_cache()

    def perform_update(self, serializer):  # type: ignore
        serializer.save()
        invalidate_accommodation_cache()

    def perform_destroy(self, instance):  # type: ignore
        _delete_unbooked(instance)
        invalidate_accommodation_cache()

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        room = self.get_object()
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        room.status = serializer.validated_data["status"]
        room.save(update_fields=["status", "updated_at"])
        invalidate_accommodation_cache()
        return Response(RoomSerializer(room).data)


class BenefitViewSet(viewsets.ModelViewSet):
    """Benefits; the public list only contains active ones and is cached."""

    queryset = Benefit.objects.all()
    serializer_class = BenefitSerializer
    permission_classes = [IsManagerOrReadOnly]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BenefitFilterSet

    def list(self, request, *args, **kwargs):  # type: ignore
        user = request.user
        if user.is_authenticated and (user.is_super_admin() or user.is_admin()):
            return super().list(request, *args, **kwargs)

        def build() -> list:
            active = Benefit.objects.filter(status=VisibilityStatus.ACTIVE)
            return list(BenefitSerializer(active, many=True).data)

        return Response(cached(default_cache(), BENEFITS_ALL, build, settings.CATALOG_CACHE_TTL))

    def perform_create(self, serializer):  # type: ignore
        serializer.save()
        invalidate_benefit_cache()

    def perform_update(self, serializer):  # type: ignore
        serializer.save()
        invalidate_benefit_cache()

    def perform_destroy(self, instance):  # type: ignore
        instance.delete()
        invalidate_benefit_cache()

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        benefit = self.get_object()
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        benefit.status = serializer.validated_data["status"]
        benefit.save(update_fields=["status"])
        invalidate_benefit_cache()
        return Response(BenefitSerializer(benefit).data, status=status.HTTP_200_OK)
