"""Pricing inputs: holiday surcharges and user discounts.

Dates are kept in the DD/MM/YYYY wire format the clients send. A sortable
YYYYMMDD copy is maintained next to each date so range filters never
compare the wire strings directly.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange, comparable_date


class DatedRangeModel(models.Model):
    from_date = models.CharField(max_length=10, help_text=_("DD/MM/YYYY"))
    to_date = models.CharField(max_length=10, help_text=_("DD/MM/YYYY"))
    from_sort = models.CharField(max_length=8, editable=False, db_index=True)
    to_sort = models.CharField(max_length=8, editable=False, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):  # type: ignore
        self.from_sort = comparable_date(self.from_date)
        self.to_sort = comparable_date(self.to_date)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and ("from_date" in update_fields or "to_date" in update_fields):
            kwargs["update_fields"] = set(update_fields) | {"from_sort", "to_sort"}
        super().save(*args, **kwargs)

    @property
    def date_range(self) -> DateRange:
        return DateRange.from_wire(self.from_date, self.to_date)


class Holiday(DatedRangeModel):
    """Period during which bookings carry a percentage surcharge."""

    name = models.CharField(max_length=255)
    price = models.PositiveIntegerField(default=0, help_text=_("Surcharge in percent of the base price."))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Holiday")
        verbose_name_plural = _("Holidays")
        ordering = ["from_sort"]

    def __str__(self) -> str:
        return f"{self.name} ({self.from_date} - {self.to_date})"


class Discount(DatedRangeModel):
    class Status(models.IntegerChoices):
        INACTIVE = 0, _("Inactive")
        ACTIVE = 1, _("Active")

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(default=0, help_text=_("Remaining redemptions."))
    discount = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Percentage taken off the base price."),
    )
    status = models.PositiveSmallIntegerField(choices=Status.choices, default=Status.ACTIVE)
    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="UserDiscount",
        related_name="discounts",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Discount")
        verbose_name_plural = _("Discounts")
        ordering = ["-updated_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(discount__lte=100), name="discount_percent_max_100"),
        ]

    def __str__(self) -> str:
        return f"{self.name} (-{self.discount}%)"


class UserDiscount(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="user_discounts")
    discount = models.ForeignKey(Discount, on_delete=models.CASCADE, related_name="assignments")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("User discount")
        verbose_name_plural = _("User discounts")
        constraints = [
            models.UniqueConstraint(fields=["user", "discount"], name="unique_user_discount"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.discount_id}"
