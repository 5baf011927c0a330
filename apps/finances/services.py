"""Invoice scoping, revenue reporting and bank account rules."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from shared.infrastructure.cache import INVOICES_PREFIX, TOTAL_REVENUE, CacheBackend, default_cache

from .models import Invoice

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# allowed account number lengths per bank short name
ACCOUNT_NUMBER_LENGTHS: Dict[str, frozenset] = {
    "SACOMBANK": frozenset({12}),
    "VIETINBANK": frozenset({12}),
    "VCB": frozenset(range(13, 17)),
    "AGRIBANK": frozenset(range(13, 17)),
    "MB": frozenset(range(9, 14)),
    "TCB": frozenset({14}),
    "BIDV": frozenset({14}),
    "ACB": frozenset({8, 9}),
    "SCB": frozenset({8, 10}),
    "VPBANK": frozenset({8, 9}),
}


class AccountNumberError(ValueError):
    """An account number that the bank cannot have issued."""


def validate_account_numbers(bank_short_name: str, account_numbers: Iterable[str]) -> List[str]:
    """Check every number against the length rule of its bank.

    Returns the numbers unchanged; unknown banks and duplicates are rejected.
    """

    short_name = (bank_short_name or "").upper()
    lengths = ACCOUNT_NUMBER_LENGTHS.get(short_name)
    if lengths is None:
        raise AccountNumberError(f"No account number rule for bank {short_name!r}.")

    numbers = [str(number) for number in account_numbers]
    seen = set()
    for number in numbers:
        if number in seen:
            raise AccountNumberError(f"Account number {number} is listed twice.")
        seen.add(number)
        if not number.isdigit():
            raise AccountNumberError(f"Account number {number} must contain digits only.")
        if len(number) not in lengths:
            allowed = ", ".join(str(n) for n in sorted(lengths))
            raise AccountNumberError(f"{short_name} account numbers must have {allowed} digits.")
    return numbers


def invoices_visible_to(user, queryset: Optional[QuerySet] = None) -> QuerySet:
    qs = queryset if queryset is not None else Invoice.objects.all()
    if not user or not user.is_authenticated:
        return qs.none()
    if user.is_super_admin():
        return qs
    owner_id = user.owner_scope_id()
    if owner_id is not None:
        return qs.filter(order__accommodation__owner_id=owner_id)
    return qs.filter(order__user=user)


def revenue_scope(user) -> str:
    if user.is_super_admin():
        return "all"
    owner_id = user.owner_scope_id()
    return f"owner={owner_id}" if owner_id is not None else f"user={user.pk}"


def _month_key(value: date) -> tuple:
    return value.year, value.month


def _previous_month(today: date) -> tuple:
    first = today.replace(day=1)
    return _month_key(first - timedelta(days=1))


def revenue_summary(invoices: Iterable[Invoice], today: date, share: Decimal = Decimal(1)) -> dict:
    """Aggregate invoice totals by period.

    Invoices are bucketed by the local date they were issued. The week runs
    from Sunday through the following Saturday. ``share`` scales every
    figure, which is how the platform owner sees their cut.
    """

    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    week_end = week_start + timedelta(days=6)
    this_month = _month_key(today)
    last_month = _previous_month(today)

    total = current_month = previous_month = current_week = Decimal(0)
    monthly = {month: [Decimal(0), 0] for month in range(1, 13)}

    for invoice in invoices:
        issued = timezone.localdate(invoice.created_at)
        amount = invoice.total_amount
        total += amount
        if _month_key(issued) == this_month:
            current_month += amount
        if _month_key(issued) == last_month:
            previous_month += amount
        if week_start <= issued <= week_end:
            current_week += amount
        if issued.year == today.year:
            monthly[issued.month][0] += amount
            monthly[issued.month][1] += 1

    share = Decimal(str(share))

    def scaled(amount: Decimal) -> Decimal:
        return (amount * share).quantize(CENT, rounding=ROUND_HALF_UP)

    return {
        "total_revenue": scaled(total),
        "current_month_revenue": scaled(current_month),
        "last_month_revenue": scaled(previous_month),
        "current_week_revenue": scaled(current_week),
        "monthly_revenue": [
            {"month": month, "revenue": scaled(revenue), "order_count": count}
            for month, (revenue, count) in monthly.items()
        ],
    }


def invalidate_invoice_caches(cache: Optional[CacheBackend] = None) -> None:
    cache = cache or default_cache()
    cache.delete_by_prefix(INVOICES_PREFIX)
    cache.delete_by_prefix(TOTAL_REVENUE)


def mark_invoice_paid(invoice: Invoice, payment_type: int, cache: Optional[CacheBackend] = None) -> Invoice:
    invoice.mark_paid(payment_type)
    logger.info("Invoice %s marked paid (%s)", invoice.invoice_code, invoice.get_payment_type_display())
    invalidate_invoice_caches(cache)
    return invoice
