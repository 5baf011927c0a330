"""Order workflow: availability, pricing and the status state machine."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db import DatabaseError, NotSupportedError, transaction  # type: ignore
from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from apps.accommodations.models import Accommodation, Room, VisibilityStatus
from apps.finances.models import Invoice
from apps.promotions.services import DiscountEligibility, EligibilityOracle, holidays_between
from shared.domain.value_objects import Bookable, InvalidDateFormat
from shared.infrastructure.cache import (
    INVOICES_PREFIX,
    ORDERS_ALL,
    TOTAL_REVENUE,
    CacheBackend,
    default_cache,
    orders_for_user,
)

from .exceptions import (
    AvailabilityCheckError,
    BookingConflictError,
    CancellationWindowExpired,
    OrderNotFound,
    OrderPermissionDenied,
    OrderValidationError,
)
from .models import AvailabilityBlock, Order
from .pricing import HolidayWindow, PriceBreakdown, compose_price

logger = logging.getLogger(__name__)

User = get_user_model()


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _is_authenticated(user) -> bool:
    return bool(user is not None and getattr(user, "is_authenticated", False))


def orders_visible_to(user, queryset: Optional[QuerySet] = None) -> QuerySet:
    """Scope orders by role.

    The super admin sees every order, an admin the orders of their own
    accommodations, a receptionist those of their admin and an ordinary
    user only their own bookings.
    """

    qs = queryset if queryset is not None else Order.objects.all()
    if not _is_authenticated(user):
        return qs.none()
    if user.is_super_admin():
        return qs
    owner_id = user.owner_scope_id()
    if owner_id is not None:
        return qs.filter(accommodation__owner_id=owner_id)
    return qs.filter(user=user)


def is_available(bookable: Bookable, check_in: date, check_out: date) -> bool:
    """True when no active block of ``bookable`` overlaps [check_in, check_out)."""

    try:
        clash = (
            AvailabilityBlock.objects.active()
            .for_bookable(bookable)
            .overlapping(check_in, check_out)
            .exists()
        )
    except DatabaseError as exc:
        logger.exception("Availability lookup failed for %s", bookable)
        raise AvailabilityCheckError("Cannot verify availability right now.") from exc
    return not clash


def holiday_windows(check_in: date, check_out: date) -> List[HolidayWindow]:
    windows = []
    for holiday in holidays_between(check_in, check_out):
        try:
            period = holiday.date_range
        except (InvalidDateFormat, ValueError):
            logger.warning("Skipping holiday %s with an invalid date range", holiday.pk)
            continue
        windows.append(HolidayWindow(period.start_date, period.end_date, holiday.price))
    return windows


def invalidate_order_caches(*user_ids: Optional[int], cache: Optional[CacheBackend] = None) -> None:
    """Drop every cached aggregate an order write can change."""

    cache = cache or default_cache()
    cache.delete_by_prefix(f"{ORDERS_ALL}:scope=")
    for user_id in {uid for uid in user_ids if uid is not None}:
        cache.delete_by_prefix(f"{orders_for_user(user_id)}:")
    cache.delete_by_prefix(INVOICES_PREFIX)
    cache.delete_by_prefix(TOTAL_REVENUE)


def _resolve_payer(actor, user_id: Optional[int]):
    """User whose discount applies: the booking user, or the one staff books for."""

    if not _is_authenticated(actor):
        return None
    if actor.is_ordinary():
        return actor
    if user_id is None:
        return None
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise OrderNotFound(f"User {user_id} does not exist.") from None


def _lock_bookables(accommodation: Accommodation, room_ids: Sequence[int]) -> List[Room]:
    if room_ids:
        rooms = list(
            _lock_queryset_if_possible(
                Room.objects.filter(accommodation=accommodation, pk__in=room_ids).order_by("id")
            )
        )
        if len(rooms) != len(set(room_ids)):
            raise OrderNotFound("One or more rooms do not exist in this accommodation.")
        return rooms
    list(_lock_queryset_if_possible(Accommodation.objects.filter(pk=accommodation.pk)))
    return []


def create_order(
    *,
    actor,
    accommodation_id: int,
    check_in: date,
    check_out: date,
    room_ids: Iterable[int] = (),
    guest_name: str = "",
    guest_email: str = "",
    guest_phone: str = "",
    user_id: Optional[int] = None,
    oracle: Optional[EligibilityOracle] = None,
    cache: Optional[CacheBackend] = None,
    now: Callable[[], datetime] = timezone.now,
) -> Order:
    """Reserve every requested bookable and persist a priced order.

    All or nothing: when a single room is busy no block is written and
    ``BookingConflictError`` is raised.
    """

    created_at = timezone.localtime(now())
    room_ids = sorted(set(room_ids))
    if check_out <= check_in:
        raise OrderValidationError("Check-out date must be after check-in date.")
    if check_in < timezone.localdate(created_at):
        raise OrderValidationError("Check-in date cannot be in the past.")

    try:
        accommodation = Accommodation.objects.get(pk=accommodation_id)
    except Accommodation.DoesNotExist:
        raise OrderNotFound(f"Accommodation {accommodation_id} does not exist.") from None
    if accommodation.status != VisibilityStatus.ACTIVE:
        raise OrderValidationError("This accommodation is not open for booking.")
    if accommodation.is_room_based and not room_ids:
        raise OrderValidationError("Select at least one room of this accommodation.")
    if not accommodation.is_room_based and room_ids:
        raise OrderValidationError("This accommodation is booked as a whole unit.")

    payer = _resolve_payer(actor, user_id)
    owner = payer
    if owner is None and guest_phone:
        owner = User.objects.filter(phone=guest_phone).first()
    if owner is None and not (guest_name and guest_phone):
        raise OrderValidationError("Guest name and phone are required.")

    oracle = oracle or DiscountEligibility()
    payer_id = payer.pk if payer is not None else None

    try:
        with transaction.atomic():
            rooms = _lock_bookables(accommodation, room_ids)
            for room in rooms:
                if room.status != VisibilityStatus.ACTIVE:
                    raise OrderValidationError(f"Room {room.pk} is not open for booking.")
            bookables = [room.as_bookable() for room in rooms] or [accommodation.as_bookable()]

            for bookable in bookables:
                if not is_available(bookable, check_in, check_out):
                    logger.warning(
                        "Booking conflict for %s between %s and %s", bookable, check_in, check_out
                    )
                    raise BookingConflictError(
                        "The selected rooms are not available for these dates."
                        if rooms
                        else "The accommodation is not available for these dates."
                    )

            nightly = sum(room.price for room in rooms) if rooms else accommodation.price
            discount_percent = oracle.discount_percent_for(payer_id) if oracle.is_eligible(payer_id) else 0
            breakdown: PriceBreakdown = compose_price(
                nightly,
                (check_out - check_in).days,
                check_in,
                check_out,
                created_at,
                holidays=holiday_windows(check_in, check_out),
                discount_percent=discount_percent,
                rush_window_days=settings.ORDER_RUSH_WINDOW_DAYS,
                rush_percent=settings.ORDER_RUSH_PERCENT,
            )

            order = Order.objects.create(
                user=owner,
                guest_name=guest_name,
                guest_email=guest_email,
                guest_phone=guest_phone,
                accommodation=accommodation,
                check_in=check_in,
                check_out=check_out,
                **breakdown.as_order_fields(),
            )
            if rooms:
                order.rooms.set(rooms)
            AvailabilityBlock.objects.bulk_create(
                [AvailabilityBlock.for_stay(order, bookable) for bookable in bookables]
            )
            if breakdown.discount > 0:
                oracle.redeem(payer_id)
    except DatabaseError as exc:
        logger.exception("Could not persist order for accommodation %s", accommodation_id)
        raise AvailabilityCheckError("Could not save the order, please retry.") from exc

    logger.info(
        "Order %s created for accommodation %s (%s nights, total %s)",
        order.pk,
        accommodation.pk,
        order.nights,
        order.total_price,
    )
    invalidate_order_caches(
        getattr(actor, "pk", None) if _is_authenticated(actor) else None,
        order.user_id,
        cache=cache,
    )
    return order


def change_order_status(
    order_id: int,
    new_status: int,
    *,
    actor,
    paid_amount: Optional[Decimal] = None,
    cache: Optional[CacheBackend] = None,
    now: Callable[[], datetime] = timezone.now,
) -> Order:
    """Move an order through Pending -> Confirmed | Cancelled.

    Repeating the current status is a no-op, so confirming twice never
    issues a second invoice.
    """

    if new_status not in Order.Status.values:
        raise OrderValidationError(f"Unknown order status {new_status}.")
    if not _is_authenticated(actor):
        raise OrderPermissionDenied("Authentication required.")

    try:
        with transaction.atomic():
            order = _lock_queryset_if_possible(orders_visible_to(actor).filter(pk=order_id)).first()
            if order is None:
                raise OrderNotFound(f"Order {order_id} does not exist.")
            if order.status == new_status:
                return order
            if order.status != Order.Status.PENDING:
                raise OrderValidationError(
                    f"Order is already {order.get_status_display().lower()} and cannot change."
                )

            if new_status == Order.Status.CANCELLED:
                _cancel(order, actor, now())
            elif new_status == Order.Status.CONFIRMED:
                _confirm(order, actor, paid_amount)

            order.status = new_status
            order.save(update_fields=["status", "updated_at"])
    except DatabaseError as exc:
        logger.exception("Could not change status of order %s", order_id)
        raise AvailabilityCheckError("Could not update the order, please retry.") from exc

    logger.info("Order %s moved to %s by user %s", order.pk, order.get_status_display(), actor.pk)
    invalidate_order_caches(actor.pk, order.user_id, cache=cache)
    return order


def _cancel(order: Order, actor, at: datetime) -> None:
    if actor.is_ordinary():
        window = timedelta(hours=settings.ORDER_SELF_CANCEL_HOURS)
        if at - order.created_at > window:
            raise CancellationWindowExpired(
                f"Orders can only be cancelled within {settings.ORDER_SELF_CANCEL_HOURS} hours of booking. "
                "Please contact an admin."
            )
    released = order.blocks.active().update(status=AvailabilityBlock.Status.RELEASED)
    logger.info("Released %s availability blocks of order %s", released, order.pk)


def _confirm(order: Order, actor, paid_amount: Optional[Decimal]) -> None:
    if not actor.is_staff_role():
        raise OrderPermissionDenied("Only staff can confirm orders.")
    paid = Decimal(paid_amount or 0)
    if paid < 0:
        raise OrderValidationError("Paid amount cannot be negative.")
    if paid > order.total_price:
        raise OrderValidationError("Paid amount cannot exceed the order total.")
    if Invoice.objects.filter(order=order).exists():
        return
    invoice = Invoice.objects.create(
        order=order,
        total_amount=order.total_price,
        paid_amount=paid,
        remaining_amount=order.total_price - paid,
    )
    logger.info("Invoice %s issued for order %s", invoice.invoice_code, order.pk)
