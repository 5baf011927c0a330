"""Tests for accommodations, rooms, benefits and geocoding."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accommodations.models import Accommodation, Benefit, Room, VisibilityStatus
from apps.accommodations.services import GeocodingError, geocode_address
from apps.orders.models import AvailabilityBlock, Order
from apps.orders.services import create_order
from apps.users.models import User
from shared.infrastructure.cache import InMemoryCache


def _mapbox_response(features, status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = {"features": features}
    return response


class GeocodingTests(APITestCase):
    @mock.patch("apps.accommodations.services.requests.get")
    def test_picks_most_relevant_feature(self, get) -> None:
        get.return_value = _mapbox_response(
            [
                {"place_name": "a", "center": [105.1, 21.1], "relevance": 0.4},
                {"place_name": "b", "center": [106.7, 10.8], "relevance": 0.9},
            ]
        )
        longitude, latitude = geocode_address("1 Le Loi", "Ben Nghe", "Quan 1", "HCM", access_token="tok")

        self.assertEqual((longitude, latitude), (106.7, 10.8))
        _, kwargs = get.call_args
        self.assertEqual(kwargs["params"], {"access_token": "tok", "country": "VN"})

    @mock.patch("apps.accommodations.services.requests.get")
    def test_empty_result_raises(self, get) -> None:
        get.return_value = _mapbox_response([])
        with self.assertRaises(GeocodingError):
            geocode_address("nowhere", access_token="tok")

    def test_missing_token_raises(self) -> None:
        with self.assertRaises(GeocodingError):
            geocode_address("1 Le Loi", access_token="")


class AccommodationAPITests(APITestCase):
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
        self.wifi = Benefit.objects.create(name="Wifi")
        self.list_url = reverse("accommodation-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "type": Accommodation.Type.ROOM_BASED,
            "name": "Sea View Hotel",
            "address": "12 Tran Phu",
            "province": "Khanh Hoa",
            "district": "Nha Trang",
            "ward": "Loc Tho",
            "people": 2,
            "price": 500000,
            "benefits": [self.wifi.id],
        }
        payload.update(overrides)
        return payload

    @override_settings(MAPBOX_ACCESS_TOKEN="tok")
    @mock.patch("apps.accommodations.services.requests.get")
    def test_admin_creates_accommodation_with_coordinates(self, get) -> None:
        get.return_value = _mapbox_response([{"center": [109.19, 12.24], "relevance": 1}])
        self.client.force_authenticate(self.owner)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        accommodation = Accommodation.objects.get(pk=response.data["id"])
        self.assertEqual(accommodation.owner, self.owner)
        self.assertEqual((accommodation.longitude, accommodation.latitude), (109.19, 12.24))

    def test_geocoding_failure_does_not_block_create(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(Accommodation.objects.get(pk=response.data["id"]).longitude)

    def test_ordinary_user_cannot_create(self) -> None:
        self.client.force_authenticate(self.guest)
        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_hidden_accommodation_leaves_public_listing(self) -> None:
        accommodation = Accommodation.objects.create(owner=self.owner, name="Hidden Gem", address="1 A")

        first = self.client.get(self.list_url)
        self.assertEqual(first.data["count"], 1)

        self.client.force_authenticate(self.owner)
        response = self.client.post(
            reverse("accommodation-change-status", args=[accommodation.id]),
            {"status": VisibilityStatus.HIDDEN},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        self.client.force_authenticate(None)
        second = self.client.get(self.list_url)
        self.assertEqual(second.data["count"], 0)

    def test_admin_cannot_edit_foreign_accommodation(self) -> None:
        accommodation = Accommodation.objects.create(owner=self.other_owner, name="Not Mine", address="1 B")
        self.client.force_authenticate(self.owner)
        response = self.client.patch(
            reverse("accommodation-detail", args=[accommodation.id]), {"name": "Mine now"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_room_requires_room_based_accommodation(self) -> None:
        unit = Accommodation.objects.create(
            owner=self.owner, name="Villa", address="1 C", type=Accommodation.Type.UNIT, price=3000000
        )
        self.client.force_authenticate(self.owner)
        response = self.client.post(
            reverse("room-list"), {"accommodation": unit.id, "name": "R1", "price": 100}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("accommodation", response.data)

    def test_owner_adds_room(self) -> None:
        hotel = Accommodation.objects.create(owner=self.owner, name="Hotel", address="1 D")
        self.client.force_authenticate(self.owner)
        response = self.client.post(
            reverse("room-list"),
            {"accommodation": hotel.id, "name": "Deluxe", "price": 800000, "people": 2},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        room = Room.objects.get(pk=response.data["id"])
        self.assertEqual(room.as_bookable().kind.value, "room")

    def test_public_benefit_list_only_active(self) -> None:
        Benefit.objects.create(name="Pool", status=VisibilityStatus.HIDDEN)
        response = self.client.get(reverse("benefit-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["name"] for row in response.data], ["Wifi"])

    def test_listing_cache_key_ignores_parameter_order(self) -> None:
        Accommodation.objects.create(owner=self.owner, name="Sea View", address="1 E", province="Khanh Hoa")
        backend = InMemoryCache()

        with mock.patch("apps.accommodations.views.default_cache", return_value=backend):
            self.client.get(self.list_url, {"name": "sea", "province": "khanh"})
            self.client.get(f"{self.list_url}?province=khanh&name=sea")

        self.assertEqual(len(backend.keys()), 1)


class BookedListingDeletionTests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com", phone="+84900000001", password="StrongPass123", role=User.Role.ADMIN
        )
        self.guest = User.objects.create_user(
            email="guest@example.com", phone="+84900000003", password="StrongPass123"
        )
        self.hotel = Accommodation.objects.create(owner=self.owner, name="Hotel", address="1 F")
        self.room = Room.objects.create(accommodation=self.hotel, name="101", price=1_000_000)
        check_in = timezone.localdate() + timedelta(days=5)
        self.order = create_order(
            actor=self.guest,
            accommodation_id=self.hotel.pk,
            room_ids=[self.room.pk],
            check_in=check_in,
            check_out=check_in + timedelta(days=2),
            cache=InMemoryCache(),
        )
        self.client.force_authenticate(self.owner)

    def test_booked_room_is_not_deleted(self) -> None:
        response = self.client.delete(reverse("room-detail", args=[self.room.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Room.objects.filter(pk=self.room.pk).exists())
        self.assertEqual(AvailabilityBlock.objects.active().filter(order=self.order).count(), 1)
        self.assertEqual(list(self.order.rooms.values_list("pk", flat=True)), [self.room.pk])

    def test_booked_accommodation_is_not_deleted(self) -> None:
        response = self.client.delete(reverse("accommodation-detail", args=[self.hotel.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Accommodation.objects.filter(pk=self.hotel.pk).exists())
        self.assertEqual(Order.objects.get(pk=self.order.pk).status, Order.Status.PENDING)

    def test_unbooked_room_is_deleted(self) -> None:
        spare = Room.objects.create(accommodation=self.hotel, name="102", price=500_000)

        response = self.client.delete(reverse("room-detail", args=[spare.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Room.objects.filter(pk=spare.pk).exists())
