"""URL routing for rates."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import RateViewSet

router = DefaultRouter()
router.register(r"", RateViewSet, basename="rate")

urlpatterns = [
    path("", include(router.urls)),
]
