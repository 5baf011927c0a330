"""HTTP tests for the order endpoints."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accommodations.models import Accommodation, Room
from apps.finances.models import Invoice
from apps.orders.models import AvailabilityBlock, Order
from apps.users.models import User
from shared.domain.value_objects import format_wire_date


class OrderAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com", phone="+84900000001", password="StrongPass123", role=User.Role.ADMIN
        )
        self.other_owner = User.objects.create_user(
            email="owner2@example.com", phone="+84900000002", password="StrongPass123", role=User.Role.ADMIN
        )
        self.guest = User.objects.create_user(
            email="guest@example.com", phone="+84900000003", password="StrongPass123"
        )
        self.hotel = Accommodation.objects.create(owner=self.owner, name="Sea View", address="1 Tran Phu")
        self.room = Room.objects.create(accommodation=self.hotel, name="101", price=1_000_000)
        self.other_hotel = Accommodation.objects.create(owner=self.other_owner, name="Hill", address="9 Le Loi")
        self.other_room = Room.objects.create(accommodation=self.other_hotel, name="A1", price=400_000)
        self.list_url = reverse("order-list")
        self.check_in = timezone.localdate() + timedelta(days=10)

    def _payload(self, **overrides) -> dict:
        payload = {
            "accommodation_id": self.hotel.pk,
            "room_ids": [self.room.pk],
            "check_in_date": format_wire_date(self.check_in),
            "check_out_date": format_wire_date(self.check_in + timedelta(days=2)),
        }
        payload.update(overrides)
        return payload

    def _create_as(self, user, **overrides):
        self.client.force_authenticate(user)
        response = self.client.post(self.list_url, self._payload(**overrides), format="json")
        self.client.force_authenticate(None)
        return response

    def test_anonymous_guest_can_book(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(guest_name="Lan", guest_phone="+84911111111", guest_email="lan@example.com"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["price"], 2_000_000)
        self.assertEqual(response.data["total_price"], "2000000.00")
        self.assertEqual(response.data["check_in"], format_wire_date(self.check_in))
        self.assertEqual(response.data["contact_name"], "Lan")
        self.assertIsNone(response.data["user_id"])

    def test_anonymous_booking_requires_contact(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("guest_phone", response.data)

    def test_wrong_date_format_is_rejected(self) -> None:
        response = self._create_as(self.guest, check_in_date=self.check_in.isoformat())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("check_in_date", response.data)

    def test_conflicting_booking_returns_409(self) -> None:
        self.assertEqual(self._create_as(self.guest).status_code, status.HTTP_201_CREATED)

        response = self._create_as(self.guest)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Order.objects.count(), 1)

    def test_unknown_accommodation_returns_404(self) -> None:
        response = self._create_as(self.guest, accommodation_id=9999)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_is_scoped_and_paginated(self) -> None:
        self._create_as(self.guest)
        self._create_as(self.guest, accommodation_id=self.other_hotel.pk, room_ids=[self.other_room.pk])

        self.client.force_authenticate(self.owner)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pagination"], {"page": 0, "limit": 10, "total": 1})
        self.assertEqual(response.data["data"][0]["accommodation_name"], "Sea View")

        self.client.force_authenticate(self.guest)
        response = self.client.get(self.list_url, {"limit": 1, "page": 1})
        self.assertEqual(response.data["pagination"]["total"], 2)
        self.assertEqual(len(response.data["data"]), 1)

    def test_list_filters_by_accommodation_name(self) -> None:
        self._create_as(self.guest)
        self._create_as(self.guest, accommodation_id=self.other_hotel.pk, room_ids=[self.other_room.pk])

        self.client.force_authenticate(self.guest)
        response = self.client.get(self.list_url, {"name": "hill"})

        self.assertEqual([o["accommodation_name"] for o in response.data["data"]], ["Hill"])

    def test_cached_list_refreshes_after_new_order(self) -> None:
        self._create_as(self.guest)
        self.client.force_authenticate(self.guest)
        self.assertEqual(self.client.get(self.list_url).data["pagination"]["total"], 1)

        self._create_as(self.guest, accommodation_id=self.other_hotel.pk, room_ids=[self.other_room.pk])

        self.client.force_authenticate(self.guest)
        self.assertEqual(self.client.get(self.list_url).data["pagination"]["total"], 2)

    def test_list_requires_authentication(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_confirms_order_and_invoice_is_issued(self) -> None:
        order_id = self._create_as(self.guest).data["id"]
        url = reverse("order-change-status", args=[order_id])

        self.client.force_authenticate(self.owner)
        response = self.client.post(url, {"status": Order.Status.CONFIRMED, "paid_amount": "500000"}, format="json")
        repeat = self.client.post(url, {"status": Order.Status.CONFIRMED, "paid_amount": "500000"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(repeat.status_code, status.HTTP_200_OK)
        self.assertEqual(Invoice.objects.filter(order_id=order_id).count(), 1)

    def test_guest_cannot_confirm(self) -> None:
        order_id = self._create_as(self.guest).data["id"]

        self.client.force_authenticate(self.guest)
        response = self.client.post(
            reverse("order-change-status", args=[order_id]), {"status": Order.Status.CONFIRMED}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_guest_late_cancel_is_refused(self) -> None:
        order_id = self._create_as(self.guest).data["id"]
        Order.objects.filter(pk=order_id).update(created_at=timezone.now() - timedelta(hours=30))
        url = reverse("order-change-status", args=[order_id])

        self.client.force_authenticate(self.guest)
        response = self.client.post(url, {"status": Order.Status.CANCELLED}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("contact an admin", response.data["detail"])

        self.client.force_authenticate(self.owner)
        response = self.client.post(url, {"status": Order.Status.CANCELLED}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(AvailabilityBlock.objects.active().filter(order_id=order_id).exists())

    def test_other_admin_gets_404(self) -> None:
        order_id = self._create_as(self.guest).data["id"]

        self.client.force_authenticate(self.other_owner)
        detail = self.client.get(reverse("order-detail", args=[order_id]))
        change = self.client.post(
            reverse("order-change-status", args=[order_id]), {"status": Order.Status.CANCELLED}, format="json"
        )

        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(change.status_code, status.HTTP_404_NOT_FOUND)

    def test_history_includes_invoice_code(self) -> None:
        order_id = self._create_as(self.guest).data["id"]
        self.client.force_authenticate(self.owner)
        self.client.post(
            reverse("order-change-status", args=[order_id]), {"status": Order.Status.CONFIRMED}, format="json"
        )

        self.client.force_authenticate(self.guest)
        response = self.client.get(reverse("order-history"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = response.data["data"][0]
        self.assertEqual(entry["invoice_code"], Invoice.objects.get(order_id=order_id).invoice_code)
