"""URL routing for holidays and discounts."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DiscountViewSet, HolidayViewSet

router = DefaultRouter()
router.register(r"holidays", HolidayViewSet, basename="holiday")
router.register(r"discounts", DiscountViewSet, basename="discount")

urlpatterns = [
    path("", include(router.urls)),
]
