"""Tests for holidays, discounts and the discount eligibility rule."""

from __future__ import annotations

from datetime import date

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.promotions.models import Discount, Holiday, UserDiscount
from apps.promotions.services import DiscountEligibility, expire_discounts, holidays_between
from apps.promotions.tasks import deactivate_expired_discounts
from apps.users.models import User

TODAY = date(2025, 5, 10)


def _discount(**overrides) -> Discount:
    values = {
        "name": "Summer",
        "quantity": 5,
        "from_date": "01/05/2025",
        "to_date": "31/05/2025",
        "discount": 15,
    }
    values.update(overrides)
    return Discount.objects.create(**values)


@pytest.fixture
def guest(db):
    return User.objects.create_user(email="guest@example.com", phone="+84900000001", password="StrongPass123")


@pytest.fixture
def oracle():
    return DiscountEligibility(today=lambda: TODAY)


@pytest.mark.django_db
def test_user_without_assignment_is_not_eligible(guest, oracle):
    _discount()
    assert not oracle.is_eligible(guest.id)
    assert oracle.discount_percent_for(guest.id) == 0.0


@pytest.mark.django_db
def test_anonymous_is_never_eligible(oracle):
    assert not oracle.is_eligible(None)


@pytest.mark.django_db
def test_best_assigned_discount_wins(guest, oracle):
    small = _discount(name="Small", discount=5)
    big = _discount(name="Big", discount=20)
    UserDiscount.objects.create(user=guest, discount=small)
    UserDiscount.objects.create(user=guest, discount=big)

    assert oracle.is_eligible(guest.id)
    assert oracle.discount_percent_for(guest.id) == 20.0


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": 0},
        {"status": Discount.Status.INACTIVE},
        {"from_date": "01/04/2025", "to_date": "30/04/2025"},
    ],
)
def test_unusable_discount_is_ignored(guest, oracle, overrides):
    UserDiscount.objects.create(user=guest, discount=_discount(**overrides))
    assert not oracle.is_eligible(guest.id)


@pytest.mark.django_db
def test_redeem_decrements_quantity(guest, oracle):
    discount = _discount(quantity=1)
    UserDiscount.objects.create(user=guest, discount=discount)

    oracle.redeem(guest.id)

    discount.refresh_from_db()
    assert discount.quantity == 0
    assert not oracle.is_eligible(guest.id)


@pytest.mark.django_db
def test_expire_discounts_switches_off_past_ranges():
    past = _discount(name="Old", from_date="01/01/2025", to_date="31/01/2025")
    current = _discount(name="Now")

    assert expire_discounts(today=TODAY) == 1

    past.refresh_from_db()
    current.refresh_from_db()
    assert past.status == Discount.Status.INACTIVE
    assert current.status == Discount.Status.ACTIVE


@pytest.mark.django_db
def test_deactivate_task_reports_count():
    _discount(name="Old", from_date="01/01/2020", to_date="31/01/2020")
    assert deactivate_expired_discounts() == {"deactivated": 1}


@pytest.mark.django_db
def test_holidays_between_uses_calendar_order():
    # lexicographic comparison of the wire strings would get this wrong
    Holiday.objects.create(name="Reunification", from_date="30/04/2025", to_date="02/05/2025", price=10)
    Holiday.objects.create(name="Tet", from_date="28/01/2025", to_date="03/02/2025", price=20)

    names = [holiday.name for holiday in holidays_between(date(2025, 5, 1), date(2025, 5, 4))]

    assert names == ["Reunification"]


class PromotionAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="owner@example.com", phone="+84900000010", password="StrongPass123", role=User.Role.ADMIN
        )
        self.client.force_authenticate(self.admin)

    def test_holiday_end_must_follow_start(self) -> None:
        response = self.client.post(
            reverse("holiday-list"),
            {"name": "Bad", "from_date": "05/05/2025", "to_date": "05/05/2025", "price": 10},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("to_date", response.data)

    def test_holiday_rejects_bad_date_format(self) -> None:
        response = self.client.post(
            reverse("holiday-list"),
            {"name": "Bad", "from_date": "2025-05-05", "to_date": "06/05/2025", "price": 10},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("from_date", response.data)

    def test_cached_holiday_list_refreshes_after_create(self) -> None:
        anonymous = APIClient()
        self.assertEqual(anonymous.get(reverse("holiday-list")).data, [])

        response = self.client.post(
            reverse("holiday-list"),
            {"name": "Tet", "from_date": "28/01/2025", "to_date": "03/02/2025", "price": 20},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        listing = anonymous.get(reverse("holiday-list")).data
        self.assertEqual([row["name"] for row in listing], ["Tet"])

    def test_holiday_bulk_delete(self) -> None:
        first = Holiday.objects.create(name="A", from_date="01/01/2025", to_date="02/01/2025", price=5)
        Holiday.objects.create(name="B", from_date="01/02/2025", to_date="02/02/2025", price=5)

        response = self.client.post(reverse("holiday-bulk-delete"), {"ids": [first.id]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(Holiday.objects.values_list("name", flat=True)), ["B"])

    def test_holiday_filter_by_date_window(self) -> None:
        Holiday.objects.create(name="Tet", from_date="28/01/2025", to_date="03/02/2025", price=20)
        Holiday.objects.create(name="National", from_date="01/09/2025", to_date="03/09/2025", price=10)

        response = self.client.get(reverse("holiday-list"), {"from_date": "01/06/2025"})

        self.assertEqual([row["name"] for row in response.data], ["National"])

    def test_discount_percent_over_100_rejected(self) -> None:
        response = self.client.post(
            reverse("discount-list"),
            {"name": "Too much", "quantity": 1, "from_date": "01/05/2025", "to_date": "31/05/2025", "discount": 120},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("discount", response.data)

    def test_assign_discount_to_user(self) -> None:
        guest = User.objects.create_user(email="g@example.com", phone="+84900000011", password="StrongPass123")
        discount = _discount(from_date="01/01/2020", to_date="31/12/2099")

        response = self.client.post(reverse("discount-assign", args=[discount.id]), {"user_ids": [guest.id]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(UserDiscount.objects.filter(user=guest, discount=discount).exists())
