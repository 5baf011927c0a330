"""Domain services for accommodations: visibility scoping, geocoding, cache."""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import quote

import requests  # type: ignore
from django.conf import settings  # type: ignore
from django.db.models import QuerySet  # type: ignore

from shared.infrastructure.cache import ACCOMMODATIONS_PREFIX, BENEFITS_ALL, CacheBackend, default_cache

from .models import Accommodation, VisibilityStatus

logger = logging.getLogger(__name__)

MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"


class GeocodingError(Exception):
    """Raised when an address cannot be resolved to coordinates."""


def geocode_address(
    address: str,
    ward: str = "",
    district: str = "",
    province: str = "",
    *,
    access_token: Optional[str] = None,
    timeout: int = 10,
) -> Tuple[float, float]:
    """Return ``(longitude, latitude)`` of the most relevant Mapbox match."""

    token = access_token if access_token is not None else getattr(settings, "MAPBOX_ACCESS_TOKEN", "")
    if not token:
        raise GeocodingError("MAPBOX_ACCESS_TOKEN is not configured")

    query = ", ".join([address, ward, district, province])
    url = MAPBOX_GEOCODING_URL.format(query=quote(query, safe=""))
    try:
        response = requests.get(url, params={"access_token": token, "country": "VN"}, timeout=timeout)
    except requests.RequestException as exc:
        raise GeocodingError(f"Geocoding request failed: {exc}") from exc

    if response.status_code != 200:
        raise GeocodingError(f"Geocoding API returned status {response.status_code}")

    try:
        features = response.json().get("features") or []
    except ValueError as exc:
        raise GeocodingError("Geocoding API returned invalid JSON") from exc
    if not features:
        raise GeocodingError("No results found")

    best = max(features, key=lambda feature: feature.get("relevance", 0))
    longitude, latitude = best["center"][0], best["center"][1]
    return float(longitude), float(latitude)


def fill_coordinates(accommodation: Accommodation) -> bool:
    """Populate missing coordinates in place; returns True when they were set.

    Geocoding failures are logged and never abort the surrounding write.
    """

    if accommodation.longitude is not None and accommodation.latitude is not None:
        return False
    try:
        longitude, latitude = geocode_address(
            accommodation.address,
            accommodation.ward,
            accommodation.district,
            accommodation.province,
        )
    except GeocodingError as exc:
        logger.warning("Could not geocode accommodation %s: %s", accommodation.name, exc)
        return False
    accommodation.longitude = longitude
    accommodation.latitude = latitude
    return True


def accommodations_visible_to(user, queryset: Optional[QuerySet] = None) -> QuerySet:
    """Scope accommodations the way the management screens expect.

    Anonymous callers and ordinary users only see active listings; admins
    see their own, receptionists see their admin's and the super admin sees
    everything.
    """

    qs = queryset if queryset is not None else Accommodation.objects.all()
    if not user or not user.is_authenticated:
        return qs.filter(status=VisibilityStatus.ACTIVE)
    if user.is_super_admin():
        return qs
    owner_id = user.owner_scope_id()
    if owner_id is not None:
        return qs.filter(owner_id=owner_id)
    return qs.filter(status=VisibilityStatus.ACTIVE)


def can_manage(user, accommodation: Accommodation) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_super_admin():
        return True
    return user.is_admin() and accommodation.owner_id == user.pk


def invalidate_accommodation_cache(cache: Optional[CacheBackend] = None) -> None:
    cache = cache or default_cache()
    cache.delete_by_prefix(ACCOMMODATIONS_PREFIX)


def invalidate_benefit_cache(cache: Optional[CacheBackend] = None) -> None:
    cache = cache or default_cache()
    cache.delete(BENEFITS_ALL)
