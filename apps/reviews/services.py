"""Rating aggregation and cache invalidation."""

from __future__ import annotations

import logging
from typing import Optional

from django.db.models import Avg  # type: ignore

from apps.accommodations.models import Accommodation
from shared.infrastructure.cache import ACCOMMODATIONS_PREFIX, RATES_PREFIX, CacheBackend, default_cache

from .models import Rate

logger = logging.getLogger(__name__)


def refresh_accommodation_rating(accommodation_id: int) -> float:
    """Store the mean star of the accommodation's rates, one decimal place."""

    average = Rate.objects.filter(accommodation_id=accommodation_id).aggregate(avg=Avg("star"))["avg"]
    rating = round(float(average), 1) if average is not None else 0.0
    Accommodation.objects.filter(pk=accommodation_id).update(rating=rating)
    logger.info("Accommodation %s rating is now %s", accommodation_id, rating)
    return rating


def invalidate_rate_caches(cache: Optional[CacheBackend] = None) -> None:
    cache = cache or default_cache()
    cache.delete_by_prefix(RATES_PREFIX)
    cache.delete_by_prefix(ACCOMMODATIONS_PREFIX)
