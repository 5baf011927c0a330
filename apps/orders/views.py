"""API views for orders."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings  # type: ignore
from django_filters.utils import translate_validation  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.infrastructure.cache import ORDERS_ALL, cached, default_cache, orders_for_user
from shared.infrastructure.pagination import PageLimitPagination

from .exceptions import (
    AvailabilityCheckError,
    BookingConflictError,
    OrderError,
    OrderNotFound,
    OrderPermissionDenied,
    OrderValidationError,
)
from .filters import OrderFilterSet
from .models import Order
from .serializers import OrderCreateSerializer, OrderHistorySerializer, OrderSerializer, OrderStatusSerializer
from .services import change_order_status, create_order, orders_visible_to

logger = logging.getLogger(__name__)

_STATUS_FOR_ERROR = (
    (OrderValidationError, status.HTTP_400_BAD_REQUEST),
    (BookingConflictError, status.HTTP_409_CONFLICT),
    (OrderNotFound, status.HTTP_404_NOT_FOUND),
    (OrderPermissionDenied, status.HTTP_403_FORBIDDEN),
)


def order_error_response(exc: OrderError) -> Response:
    for error_class, http_status in _STATUS_FOR_ERROR:
        if isinstance(exc, error_class):
            return Response({"detail": str(exc)}, status=http_status)
    if not isinstance(exc, AvailabilityCheckError):
        logger.error("Unmapped order error: %s", exc)
    return Response(
        {"detail": "Something went wrong, please try again later."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class OrderViewSet(mixins.CreateModelMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Bookings.

    Anyone may book; listings are scoped by role and cached per scope and
    query until the next order write.
    """

    queryset = Order.objects.select_related("accommodation", "user", "invoice").prefetch_related("rooms")
    serializer_class = OrderSerializer
    pagination_class = PageLimitPagination
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return OrderCreateSerializer
        if self.action == "change_status":
            return OrderStatusSerializer
        if self.action == "history":
            return OrderHistorySerializer
        return OrderSerializer

    def get_queryset(self):  # type: ignore
        return orders_visible_to(self.request.user, super().get_queryset()).order_by("-updated_at", "-id")

    def _list_cache_key(self, request) -> str:
        query = urlencode(sorted(request.query_params.items()))
        user = request.user
        if user.is_ordinary():
            return f"{orders_for_user(user.pk)}:{query}"
        scope = "all" if user.is_super_admin() else user.owner_scope_id()
        return f"{ORDERS_ALL}:scope={scope}:{query}"

    def list(self, request, *args, **kwargs):  # type: ignore
        def build() -> dict:
            filterset = OrderFilterSet(request.query_params, queryset=self.get_queryset(), request=request)
            if not filterset.is_valid():
                raise translate_validation(filterset.errors)
            queryset = filterset.qs
            page = self.paginator.paginate_queryset(queryset, request, view=self)
            return self.paginator.get_payload(list(OrderSerializer(page, many=True).data))

        payload = cached(default_cache(), self._list_cache_key(request), build, settings.ORDER_CACHE_TTL)
        return Response(payload)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = create_order(
                actor=request.user,
                accommodation_id=data["accommodation_id"],
                room_ids=data["room_ids"],
                check_in=data["check_in_date"],
                check_out=data["check_out_date"],
                guest_name=data["guest_name"],
                guest_email=data["guest_email"],
                guest_phone=data["guest_phone"],
                user_id=data["user_id"],
            )
        except OrderError as exc:
            return order_error_response(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = change_order_status(
                int(pk),
                serializer.validated_data["status"],
                actor=request.user,
                paid_amount=serializer.validated_data.get("paid_amount"),
            )
        except OrderError as exc:
            return order_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def history(self, request):  # type: ignore
        queryset = super().get_queryset().filter(user=request.user).order_by("-updated_at", "-id")
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderHistorySerializer(page, many=True).data)
