"""Cache-aside helpers shared by every domain app.

Services receive a ``CacheBackend`` instead of touching ``django.core.cache``
directly, so tests can hand in ``InMemoryCache``. Cache failures are never
fatal: a failed read is treated as a miss and a failed delete leaves the
stale entry in place until it expires.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

KEY_REGISTRY = "cache:registered_keys"

ORDERS_ALL = "orders:all"
INVOICES_PREFIX = "invoices:"
TOTAL_REVENUE = "total_revenue"
HOLIDAYS_ALL = "holidays:all"
DISCOUNTS_ALL = "discounts:all"
BENEFITS_ALL = "benefits:all"
ACCOMMODATIONS_PREFIX = "accommodations:"
RATES_PREFIX = "rates:"


def orders_for_user(user_id) -> str:
    return f"orders:all:user:{user_id}"


def invoices_page(scope, page: int, limit: int) -> str:
    return f"invoices:all:scope={scope}:page={page}:limit={limit}"


def rates_scope(accommodation_id=None) -> str:
    if accommodation_id in (None, ""):
        return "rates:all"
    return f"rates:accommodation:{accommodation_id}"


class CacheBackend(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: Optional[int]) -> None: ...

    def delete(self, key: str) -> None: ...

    def delete_by_prefix(self, prefix: str) -> None: ...


class DjangoCache:
    """Adapter over a configured Django cache alias."""

    def __init__(self, alias: str = "default"):
        self.alias = alias

    @property
    def _cache(self):
        return caches[self.alias]

    def get(self, key: str) -> Any:
        try:
            return self._cache.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    def set(self, key: str, value: Any, ttl: Optional[int]) -> None:
        try:
            self._cache.set(key, value, ttl)
            self._register_key(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache write failed for %s: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            self._cache.delete(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache delete failed for %s: %s", key, exc)

    def delete_by_prefix(self, prefix: str) -> None:
        try:
            if hasattr(self._cache, "delete_pattern"):
                # django-redis exposes SCAN based pattern deletion
                self._cache.delete_pattern(f"{prefix}*")
                return
            keys: List[str] = self._cache.get(KEY_REGISTRY) or []
            matching = [key for key in keys if key.startswith(prefix)]
            if matching:
                self._cache.delete_many(matching)
                self._cache.set(KEY_REGISTRY, [key for key in keys if key not in matching], None)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache prefix delete failed for %s: %s", prefix, exc)

    def _register_key(self, key: str) -> None:
        if hasattr(self._cache, "delete_pattern"):
            return
        keys: List[str] | None = self._cache.get(KEY_REGISTRY)
        if keys is None:
            self._cache.set(KEY_REGISTRY, [key], None)
            return
        if key in keys:
            return
        keys.append(key)
        self._cache.set(KEY_REGISTRY, keys, None)


class InMemoryCache:
    """Process local fake honouring TTLs; used in tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Any:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[int]) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def delete_by_prefix(self, prefix: str) -> None:
        for key in [k for k in self._data if k.startswith(prefix)]:
            del self._data[key]

    def keys(self) -> List[str]:
        return list(self._data)


def default_cache() -> CacheBackend:
    return DjangoCache(getattr(settings, "DOMAIN_CACHE_ALIAS", "default"))


def cached(cache: CacheBackend, key: str, builder: Callable[[], Any], ttl: Optional[int]) -> Any:
    """Read-through: return the cached value or build, store and return it."""
    value = cache.get(key)
    if value is not None:
        return value
    value = builder()
    cache.set(key, value, ttl)
    return value


__all__ = [
    "CacheBackend",
    "DjangoCache",
    "InMemoryCache",
    "cached",
    "default_cache",
    "orders_for_user",
    "invoices_page",
    "rates_scope",
]
