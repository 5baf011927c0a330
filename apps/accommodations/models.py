"""Accommodation domain models.

An accommodation is either room-based (guests book individual rooms) or a
whole unit (the accommodation itself is the reservable entity). Both kinds
are exposed to the booking core through ``as_bookable()``.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Bookable, BookableKind


class VisibilityStatus(models.IntegerChoices):
    ACTIVE = 0, _("Active")
    HIDDEN = 1, _("Hidden")


class Benefit(models.Model):
    """Amenity shown on accommodations and rooms (wifi, pool, ...)."""

    name = models.CharField(max_length=100, unique=True)
    status = models.PositiveSmallIntegerField(choices=VisibilityStatus.choices, default=VisibilityStatus.ACTIVE)

    class Meta:
        verbose_name = _("Benefit")
        verbose_name_plural = _("Benefits")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Accommodation(models.Model):
    """Hotel, homestay or villa owned by an admin."""

    class Type(models.IntegerChoices):
        ROOM_BASED = 0, _("Room based")
        UNIT = 1, _("Whole unit")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="accommodations",
    )
    type = models.PositiveSmallIntegerField(choices=Type.choices, default=Type.ROOM_BASED)
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    province = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)
    ward = models.CharField(max_length=100, blank=True)
    avatar = models.URLField(blank=True)
    images = models.JSONField(default=list, blank=True)
    short_description = models.CharField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    status = models.PositiveSmallIntegerField(choices=VisibilityStatus.choices, default=VisibilityStatus.ACTIVE)
    num = models.PositiveIntegerField(default=0, help_text=_("Number of identical units."))
    furniture = models.JSONField(default=list, blank=True)
    people = models.PositiveSmallIntegerField(default=1)
    price = models.PositiveIntegerField(default=0, help_text=_("Price per night for whole-unit bookings."))
    time_check_in = models.CharField(max_length=5, default="14:00")
    time_check_out = models.CharField(max_length=5, default="12:00")
    longitude = models.FloatField(null=True, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    rating = models.FloatField(default=0, editable=False, help_text=_("Average star rating."))
    benefits = models.ManyToManyField(Benefit, blank=True, related_name="accommodations")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Accommodation")
        verbose_name_plural = _("Accommodations")
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["owner", "status"]),
            models.Index(fields=["province"]),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_room_based(self) -> bool:
        return self.type == self.Type.ROOM_BASED

    @property
    def full_address(self) -> str:
        parts = [self.address, self.ward, self.district, self.province]
        return ", ".join(part for part in parts if part)

    def as_bookable(self) -> Bookable:
        return Bookable(BookableKind.UNIT, self.pk)


class Room(models.Model):
    accommodation = models.ForeignKey(Accommodation, on_delete=models.CASCADE, related_name="rooms")
    name = models.CharField(max_length=255)
    type = models.PositiveSmallIntegerField(default=0)
    num_bed = models.PositiveSmallIntegerField(default=1)
    num_toilet = models.PositiveSmallIntegerField(default=1)
    acreage = models.PositiveIntegerField(default=0)
    people = models.PositiveSmallIntegerField(default=1)
    price = models.PositiveIntegerField(default=0, help_text=_("Price per night."))
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=500, blank=True)
    avatar = models.URLField(blank=True)
    images = models.JSONField(default=list, blank=True)
    furniture = models.JSONField(default=list, blank=True)
    status = models.PositiveSmallIntegerField(choices=VisibilityStatus.choices, default=VisibilityStatus.ACTIVE)
    benefits = models.ManyToManyField(Benefit, blank=True, related_name="rooms")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["accommodation_id", "id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.accommodation_id})"

    def as_bookable(self) -> Bookable:
        return Bookable(BookableKind.ROOM, self.pk)
