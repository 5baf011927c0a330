"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BankDirectoryViewSet, BankViewSet, InvoiceViewSet

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoice")
router.register(r"banks", BankDirectoryViewSet, basename="bank")
router.register(r"bank-accounts", BankViewSet, basename="bank-account")

urlpatterns = [
    path("", include(router.urls)),
]
