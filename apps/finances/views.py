"""API views for invoices, revenue and banks."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsManager, IsStaffRole, IsSuperAdmin
from shared.infrastructure.cache import TOTAL_REVENUE, cached, default_cache, invoices_page
from shared.infrastructure.pagination import PageLimitPagination

from .models import Bank, BankDirectory, Invoice
from .serializers import (
    AccountNumbersSerializer,
    BankDirectorySerializer,
    BankSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
)
from .services import invoices_visible_to, mark_invoice_paid, revenue_scope, revenue_summary


class InvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    """Invoices issued on order confirmation, scoped like orders."""

    queryset = Invoice.objects.select_related("order", "order__accommodation", "order__user")
    serializer_class = InvoiceSerializer
    pagination_class = PageLimitPagination
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action == "retrieve":
            return [permissions.IsAuthenticated()]
        return [IsStaffRole()]

    def get_queryset(self):  # type: ignore
        return invoices_visible_to(self.request.user, super().get_queryset()).order_by("-updated_at", "-id")

    def list(self, request, *args, **kwargs):  # type: ignore
        page, limit = self.paginator.get_params(request)

        def build() -> dict:
            rows = self.paginator.paginate_queryset(self.get_queryset(), request, view=self)
            return self.paginator.get_payload(list(InvoiceSerializer(rows, many=True).data))

        key = invoices_page(revenue_scope(request.user), page, limit)
        return Response(cached(default_cache(), key, build, settings.INVOICE_CACHE_TTL))

    @action(detail=False, methods=["get"])
    def revenue(self, request):  # type: ignore
        user = request.user
        share = Decimal(str(settings.PLATFORM_REVENUE_SHARE)) if user.is_super_admin() else Decimal(1)

        def build() -> dict:
            summary = revenue_summary(self.get_queryset(), timezone.localdate(), share)
            summary["monthly_revenue"] = [
                {**bucket, "revenue": str(bucket["revenue"])} for bucket in summary["monthly_revenue"]
            ]
            return {
                key: str(value) if isinstance(value, Decimal) else value for key, value in summary.items()
            }

        key = f"{TOTAL_REVENUE}:{revenue_scope(user)}"
        return Response(cached(default_cache(), key, build, settings.INVOICE_CACHE_TTL))

    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):  # type: ignore
        invoice: Invoice = self.get_object()
        if invoice.status == Invoice.Status.PAID:
            return Response({"detail": "Invoice is already paid."}, status=status.HTTP_400_BAD_REQUEST)
        serializer = InvoicePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        mark_invoice_paid(invoice, serializer.validated_data["payment_type"])
        return Response(InvoiceSerializer(invoice).data)


class BankDirectoryViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Banks the platform accepts transfers on."""

    queryset = BankDirectory.objects.all()
    serializer_class = BankDirectorySerializer
    pagination_class = None

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve"}:
            return [permissions.IsAuthenticated()]
        return [IsSuperAdmin()]

    @action(detail=True, methods=["post"], url_path="account-numbers")
    def add_account_numbers(self, request, pk=None):  # type: ignore
        bank: BankDirectory = self.get_object()
        serializer = AccountNumbersSerializer(data=request.data, context={"bank": bank})
        serializer.is_valid(raise_exception=True)
        bank.account_numbers = serializer.validated_data["account_numbers"]
        bank.save(update_fields=["account_numbers"])
        return Response(BankDirectorySerializer(bank).data)

    @action(detail=False, methods=["delete"], url_path="all")
    def delete_all(self, request):  # type: ignore
        deleted, _ = BankDirectory.objects.all().delete()
        return Response({"deleted": deleted})


class BankViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Payout accounts of the signed-in admin."""

    serializer_class = BankSerializer
    permission_classes = [IsManager]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return Bank.objects.filter(user=self.request.user)

    def perform_create(self, serializer):  # type: ignore
        serializer.save(user=self.request.user)
