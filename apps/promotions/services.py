"""Domain services for promotions.

``DiscountEligibility`` is the oracle order pricing consults: whether a
user currently qualifies for a discount and for how many percent.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Protocol

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import COMPARABLE_DATE_FORMAT
from shared.infrastructure.cache import DISCOUNTS_ALL, HOLIDAYS_ALL, CacheBackend, default_cache

from .models import Discount, Holiday, UserDiscount

logger = logging.getLogger(__name__)


class EligibilityOracle(Protocol):
    def is_eligible(self, user_id: Optional[int]) -> bool: ...

    def discount_percent_for(self, user_id: Optional[int]) -> float: ...

    def redeem(self, user_id: Optional[int]) -> None: ...


class DiscountEligibility:
    """Database backed eligibility rule.

    A user qualifies while they hold an assignment to an active discount
    whose validity range covers today and that still has redemptions left.
    When several qualify the largest percentage wins.
    """

    def __init__(self, today: Callable[[], date] = timezone.localdate):
        self._today = today

    def _candidates(self, user_id: int):
        today_key = self._today().strftime(COMPARABLE_DATE_FORMAT)
        return Discount.objects.filter(
            assignments__user_id=user_id,
            status=Discount.Status.ACTIVE,
            quantity__gt=0,
            from_sort__lte=today_key,
            to_sort__gte=today_key,
        ).order_by("-discount", "id")

    def best_discount(self, user_id: Optional[int]) -> Optional[Discount]:
        if user_id is None:
            return None
        return self._candidates(user_id).first()

    def is_eligible(self, user_id: Optional[int]) -> bool:
        return self.best_discount(user_id) is not None

    def discount_percent_for(self, user_id: Optional[int]) -> float:
        discount = self.best_discount(user_id)
        return float(discount.discount) if discount else 0.0

    def redeem(self, user_id: Optional[int]) -> None:
        """Consume one redemption of the discount the user just used."""
        discount = self.best_discount(user_id)
        if discount is None:
            return
        updated = Discount.objects.filter(pk=discount.pk, quantity__gt=0).update(quantity=F("quantity") - 1)
        if updated:
            logger.info("Discount %s redeemed by user %s", discount.pk, user_id)
            default_cache().delete(DISCOUNTS_ALL)


def holidays_between(check_in: date, check_out: date) -> List[Holiday]:
    """Holidays whose sortable range may touch the stay; callers apply the exact test."""
    start_key = check_in.strftime(COMPARABLE_DATE_FORMAT)
    end_key = check_out.strftime(COMPARABLE_DATE_FORMAT)
    return list(Holiday.objects.filter(from_sort__lte=end_key, to_sort__gte=start_key))


def expire_discounts(today: Optional[date] = None, cache: Optional[CacheBackend] = None) -> int:
    """Switch off active discounts whose validity ended before ``today``."""
    today = today or timezone.localdate()
    today_key = today.strftime(COMPARABLE_DATE_FORMAT)
    expired = Discount.objects.filter(status=Discount.Status.ACTIVE, to_sort__lt=today_key)
    count = expired.update(status=Discount.Status.INACTIVE, updated_at=timezone.now())
    if count:
        logger.info("Deactivated %s expired discounts", count)
        (cache or default_cache()).delete(DISCOUNTS_ALL)
    return count


@transaction.atomic
def assign_discount(discount: Discount, user_ids: Iterable[int]) -> int:
    created = 0
    for user_id in set(user_ids):
        _, was_created = UserDiscount.objects.get_or_create(discount=discount, user_id=user_id)
        created += int(was_created)
    return created


def invalidate_holiday_cache(cache: Optional[CacheBackend] = None) -> None:
    (cache or default_cache()).delete(HOLIDAYS_ALL)


def invalidate_discount_cache(cache: Optional[CacheBackend] = None) -> None:
    (cache or default_cache()).delete(DISCOUNTS_ALL)
