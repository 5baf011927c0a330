"""Order domain models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Bookable, BookableKind, DateRange

MONEY = {"max_digits": 14, "decimal_places": 2, "default": Decimal("0.00")}


class Order(models.Model):
    """Reservation of one accommodation (whole unit) or a set of its rooms."""

    class Status(models.IntegerChoices):
        PENDING = 0, _("Pending")
        CONFIRMED = 1, _("Confirmed")
        CANCELLED = 2, _("Cancelled")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=20, blank=True)
    accommodation = models.ForeignKey(
        "accommodations.Accommodation",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    rooms = models.ManyToManyField("accommodations.Room", blank=True, related_name="orders")
    check_in = models.DateField()
    check_out = models.DateField()
    price = models.PositiveIntegerField(default=0, help_text=_("Base amount: nightly price times nights."))
    holiday_price = models.DecimalField(**MONEY)
    rush_price = models.DecimalField(**MONEY)
    sold_out_price = models.DecimalField(**MONEY)
    discount_price = models.DecimalField(**MONEY)
    total_price = models.DecimalField(**MONEY)
    status = models.PositiveSmallIntegerField(choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-updated_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="order_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["accommodation", "status"]),
            models.Index(fields=["user", "status"]),
        ]

    def __str__(self) -> str:
        return f"Order #{self.pk} ({self.get_status_display()})"

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        return len(self.stay)

    @property
    def contact_name(self) -> str:
        return self.user.username if self.user_id else self.guest_name

    @property
    def contact_email(self) -> str:
        return self.user.email if self.user_id else self.guest_email

    @property
    def contact_phone(self) -> str:
        return (self.user.phone or "") if self.user_id else self.guest_phone


class AvailabilityBlockQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=AvailabilityBlock.Status.ACTIVE)

    def for_bookable(self, bookable: Bookable):
        if bookable.kind == BookableKind.ROOM:
            return self.filter(kind=BookableKind.ROOM.value, room_id=bookable.id)
        return self.filter(kind=BookableKind.UNIT.value, accommodation_id=bookable.id)

    def overlapping(self, check_in, check_out):
        # half-open: a stay ending on a day does not clash with one starting that day
        return self.filter(from_date__lt=check_out, to_date__gt=check_in)


class AvailabilityBlock(models.Model):
    """Date interval reserved for a room or a whole accommodation."""

    class Status(models.IntegerChoices):
        RELEASED = 0, _("Released")
        ACTIVE = 1, _("Active")

    class Kind(models.TextChoices):
        ROOM = BookableKind.ROOM.value, _("Room")
        UNIT = BookableKind.UNIT.value, _("Whole unit")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="blocks", null=True, blank=True)
    kind = models.CharField(max_length=8, choices=Kind.choices)
    accommodation = models.ForeignKey(
        "accommodations.Accommodation",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="availability_blocks",
    )
    room = models.ForeignKey(
        "accommodations.Room",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="availability_blocks",
    )
    from_date = models.DateField()
    to_date = models.DateField()
    status = models.PositiveSmallIntegerField(choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AvailabilityBlockQuerySet.as_manager()

    class Meta:
        verbose_name = _("Availability block")
        verbose_name_plural = _("Availability blocks")
        ordering = ["from_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(to_date__gt=models.F("from_date")),
                name="availability_block_valid_dates",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(kind="room", room__isnull=False, accommodation__isnull=True)
                    | models.Q(kind="unit", room__isnull=True, accommodation__isnull=False)
                ),
                name="availability_block_single_target",
            ),
        ]
        indexes = [
            models.Index(fields=["kind", "room", "status"]),
            models.Index(fields=["kind", "accommodation", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.bookable} {self.from_date:%d/%m/%Y}-{self.to_date:%d/%m/%Y}"

    @property
    def bookable(self) -> Bookable:
        if self.kind == self.Kind.ROOM:
            return Bookable(BookableKind.ROOM, self.room_id)
        return Bookable(BookableKind.UNIT, self.accommodation_id)

    @classmethod
    def for_stay(cls, order: Order, bookable: Bookable) -> "AvailabilityBlock":
        block = cls(order=order, kind=bookable.kind.value, from_date=order.check_in, to_date=order.check_out)
        if bookable.kind == BookableKind.ROOM:
            block.room_id = bookable.id
        else:
            block.accommodation_id = bookable.id
        return block
