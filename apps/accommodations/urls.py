"""URL routing for the accommodations domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AccommodationViewSet, BenefitViewSet, RoomViewSet

router = DefaultRouter()
# prefixed routes first so they are not captured by the accommodation detail route
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"benefits", BenefitViewSet, basename="benefit")
router.register(r"", AccommodationViewSet, basename="accommodation")

urlpatterns = [
    path("", include(router.urls)),
]
