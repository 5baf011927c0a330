"""Availability, order creation and the status state machine."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest import mock
from zoneinfo import ZoneInfo

import pytest
from django.db import DatabaseError

from apps.accommodations.models import Accommodation, Room
from apps.finances.models import Invoice
from apps.orders.exceptions import (
    AvailabilityCheckError,
    BookingConflictError,
    CancellationWindowExpired,
    OrderNotFound,
    OrderPermissionDenied,
    OrderValidationError,
)
from apps.orders.models import AvailabilityBlock, Order
from apps.orders.services import change_order_status, create_order, is_available, orders_visible_to
from apps.promotions.models import Holiday
from apps.users.models import User
from shared.domain.value_objects import Bookable, BookableKind
from shared.infrastructure.cache import InMemoryCache

NOW = datetime(2025, 5, 5, 9, 0, tzinfo=ZoneInfo("Asia/Ho_Chi_Minh"))


class StubOracle:
    def __init__(self, percents=None):
        self.percents = percents or {}
        self.redeemed = []

    def is_eligible(self, user_id):
        return user_id in self.percents

    def discount_percent_for(self, user_id):
        return self.percents.get(user_id, 0.0)

    def redeem(self, user_id):
        self.redeemed.append(user_id)


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email="owner@example.com", phone="+84900000001", password="StrongPass123", role=User.Role.ADMIN
    )


@pytest.fixture
def guest(db):
    return User.objects.create_user(email="guest@example.com", phone="+84900000002", password="StrongPass123")


@pytest.fixture
def hotel(owner):
    return Accommodation.objects.create(owner=owner, name="Sea View", address="1 Tran Phu")


@pytest.fixture
def villa(owner):
    return Accommodation.objects.create(
        owner=owner, name="Villa", address="2 Tran Phu", type=Accommodation.Type.UNIT, price=800_000
    )


@pytest.fixture
def rooms(hotel):
    return [
        Room.objects.create(accommodation=hotel, name="101", price=1_000_000),
        Room.objects.create(accommodation=hotel, name="102", price=500_000),
    ]


def _book(actor, accommodation, check_in, check_out, room_ids=(), **kwargs):
    kwargs.setdefault("oracle", StubOracle())
    kwargs.setdefault("now", lambda: NOW)
    kwargs.setdefault("cache", InMemoryCache())
    return create_order(
        actor=actor,
        accommodation_id=accommodation.pk,
        room_ids=room_ids,
        check_in=check_in,
        check_out=check_out,
        **kwargs,
    )


@pytest.mark.django_db
def test_room_order_is_priced_and_blocks_each_room(guest, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [r.pk for r in rooms])

    assert order.user == guest
    assert order.price == 3_000_000
    assert order.total_price == Decimal("3000000.00")
    assert set(order.rooms.values_list("pk", flat=True)) == {r.pk for r in rooms}
    blocks = AvailabilityBlock.objects.filter(order=order)
    assert blocks.count() == 2
    assert set(blocks.values_list("kind", flat=True)) == {BookableKind.ROOM.value}


@pytest.mark.django_db
def test_unit_order_blocks_whole_accommodation(guest, villa):
    order = _book(guest, villa, date(2025, 5, 10), date(2025, 5, 13))

    assert order.price == 2_400_000
    block = AvailabilityBlock.objects.get(order=order)
    assert block.bookable == Bookable(BookableKind.UNIT, villa.pk)

    with pytest.raises(BookingConflictError):
        _book(guest, villa, date(2025, 5, 12), date(2025, 5, 14))


@pytest.mark.django_db
def test_overlapping_request_is_rejected(guest, hotel, rooms):
    _book(guest, hotel, date(2025, 5, 11), date(2025, 5, 13), [rooms[0].pk])

    with pytest.raises(BookingConflictError):
        _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_multi_room_request_is_all_or_nothing(guest, hotel, rooms):
    _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    with pytest.raises(BookingConflictError):
        _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 11), [rooms[1].pk, rooms[0].pk])

    assert not AvailabilityBlock.objects.filter(room=rooms[1]).exists()
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_same_day_turnover_is_allowed(guest, hotel, rooms):
    _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])
    second = _book(guest, hotel, date(2025, 5, 12), date(2025, 5, 14), [rooms[0].pk])

    assert second.pk is not None
    assert is_available(rooms[0].as_bookable(), date(2025, 5, 14), date(2025, 5, 15))
    assert not is_available(rooms[0].as_bookable(), date(2025, 5, 13), date(2025, 5, 15))


@pytest.mark.django_db
def test_availability_lookup_failure_is_not_available(rooms):
    with mock.patch.object(AvailabilityBlock.objects, "active", side_effect=DatabaseError("down")):
        with pytest.raises(AvailabilityCheckError):
            is_available(rooms[0].as_bookable(), date(2025, 5, 10), date(2025, 5, 12))


@pytest.mark.django_db
@pytest.mark.parametrize(
    "check_in, check_out",
    [
        (date(2025, 5, 12), date(2025, 5, 12)),
        (date(2025, 5, 12), date(2025, 5, 10)),
        (date(2025, 5, 1), date(2025, 5, 3)),
    ],
)
def test_invalid_dates_are_rejected(guest, hotel, rooms, check_in, check_out):
    with pytest.raises(OrderValidationError):
        _book(guest, hotel, check_in, check_out, [rooms[0].pk])
    assert not AvailabilityBlock.objects.exists()


@pytest.mark.django_db
def test_room_of_another_accommodation_is_not_found(guest, hotel, owner):
    other = Accommodation.objects.create(owner=owner, name="Other", address="3 Tran Phu")
    foreign = Room.objects.create(accommodation=other, name="201", price=100)

    with pytest.raises(OrderNotFound):
        _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [foreign.pk])


@pytest.mark.django_db
def test_unknown_accommodation_is_not_found(guest):
    with pytest.raises(OrderNotFound):
        create_order(
            actor=guest,
            accommodation_id=999,
            check_in=date(2025, 5, 10),
            check_out=date(2025, 5, 12),
            now=lambda: NOW,
        )


@pytest.mark.django_db
def test_room_ids_on_unit_accommodation_rejected(guest, villa, rooms):
    with pytest.raises(OrderValidationError):
        _book(guest, villa, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])


@pytest.mark.django_db
def test_holiday_surcharge_applied(guest, hotel, rooms):
    Holiday.objects.create(name="Reunification", from_date="09/05/2025", to_date="15/05/2025", price=10)

    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    assert order.holiday_price == Decimal("200000.00")
    assert order.total_price == Decimal("2200000.00")


@pytest.mark.django_db
def test_eligible_payer_gets_discount_and_redeems(guest, hotel, rooms):
    oracle = StubOracle({guest.pk: 15.0})

    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk], oracle=oracle)

    assert order.discount_price == Decimal("300000.00")
    assert order.total_price == Decimal("1700000.00")
    assert oracle.redeemed == [guest.pk]


@pytest.mark.django_db
def test_guest_phone_links_user_without_discount(guest, hotel, rooms):
    oracle = StubOracle({guest.pk: 15.0})

    order = _book(
        None,
        hotel,
        date(2025, 5, 10),
        date(2025, 5, 12),
        [rooms[0].pk],
        guest_name="Lan",
        guest_phone=guest.phone,
        oracle=oracle,
    )

    assert order.user == guest
    assert order.discount_price == 0
    assert oracle.redeemed == []


@pytest.mark.django_db
def test_anonymous_order_requires_contact_details(hotel, rooms):
    with pytest.raises(OrderValidationError):
        _book(None, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])


@pytest.mark.django_db
def test_create_invalidates_order_caches(guest, hotel, rooms):
    cache = InMemoryCache()
    for key in (
        "orders:all:scope=all:",
        f"orders:all:user:{guest.pk}:page=0",
        "invoices:all:scope=all:page=0:limit=10",
        "total_revenue:all",
        "holidays:all",
    ):
        cache.set(key, "x", None)

    _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk], cache=cache)

    assert cache.keys() == ["holidays:all"]


@pytest.mark.django_db
def test_guest_cannot_cancel_after_window(guest, owner, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])
    late = order.created_at + timedelta(hours=30)

    with pytest.raises(CancellationWindowExpired) as excinfo:
        change_order_status(order.pk, Order.Status.CANCELLED, actor=guest, now=lambda: late, cache=InMemoryCache())
    assert "contact an admin" in str(excinfo.value)

    change_order_status(order.pk, Order.Status.CANCELLED, actor=owner, now=lambda: late, cache=InMemoryCache())

    order.refresh_from_db()
    assert order.status == Order.Status.CANCELLED
    assert not AvailabilityBlock.objects.active().filter(order=order).exists()
    assert is_available(rooms[0].as_bookable(), date(2025, 5, 10), date(2025, 5, 12))


@pytest.mark.django_db
def test_guest_can_cancel_inside_window(guest, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])
    soon = order.created_at + timedelta(hours=1)

    change_order_status(order.pk, Order.Status.CANCELLED, actor=guest, now=lambda: soon, cache=InMemoryCache())

    assert AvailabilityBlock.objects.get(order=order).status == AvailabilityBlock.Status.RELEASED


@pytest.mark.django_db
def test_confirm_issues_exactly_one_invoice(guest, owner, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    change_order_status(
        order.pk, Order.Status.CONFIRMED, actor=owner, paid_amount=Decimal("500000"), cache=InMemoryCache()
    )
    change_order_status(
        order.pk, Order.Status.CONFIRMED, actor=owner, paid_amount=Decimal("500000"), cache=InMemoryCache()
    )

    invoice = Invoice.objects.get(order=order)
    assert Invoice.objects.count() == 1
    assert invoice.total_amount == order.total_price
    assert invoice.paid_amount == Decimal("500000.00")
    assert invoice.remaining_amount == Decimal("1500000.00")
    assert invoice.invoice_code


@pytest.mark.django_db
def test_guest_cannot_confirm(guest, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    with pytest.raises(OrderPermissionDenied):
        change_order_status(order.pk, Order.Status.CONFIRMED, actor=guest, cache=InMemoryCache())
    assert not Invoice.objects.exists()


@pytest.mark.django_db
def test_paid_amount_cannot_exceed_total(guest, owner, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    with pytest.raises(OrderValidationError):
        change_order_status(
            order.pk, Order.Status.CONFIRMED, actor=owner, paid_amount=Decimal("9000000"), cache=InMemoryCache()
        )


@pytest.mark.django_db
def test_terminal_states_do_not_change(guest, owner, hotel, rooms):
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])
    change_order_status(order.pk, Order.Status.CANCELLED, actor=owner, cache=InMemoryCache())

    with pytest.raises(OrderValidationError):
        change_order_status(order.pk, Order.Status.CONFIRMED, actor=owner, cache=InMemoryCache())


@pytest.mark.django_db
def test_other_admin_cannot_see_order(guest, hotel, rooms):
    stranger = User.objects.create_user(
        email="stranger@example.com", phone="+84900000009", password="StrongPass123", role=User.Role.ADMIN
    )
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    assert not orders_visible_to(stranger).exists()
    with pytest.raises(OrderNotFound):
        change_order_status(order.pk, Order.Status.CONFIRMED, actor=stranger, cache=InMemoryCache())


@pytest.mark.django_db
def test_receptionist_sees_admin_orders(guest, owner, hotel, rooms):
    receptionist = User.objects.create_user(
        email="desk@example.com",
        phone="+84900000010",
        password="StrongPass123",
        role=User.Role.RECEPTIONIST,
        admin=owner,
    )
    order = _book(guest, hotel, date(2025, 5, 10), date(2025, 5, 12), [rooms[0].pk])

    assert list(orders_visible_to(receptionist)) == [order]
