"""Models for the review domain.

A ``Rate`` is the star rating (1-5) and optional comment a user leaves for
an accommodation. Every user rates a given accommodation at most once and
edits that rating afterwards.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Rate(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="rates")
    accommodation = models.ForeignKey(
        "accommodations.Accommodation", on_delete=models.CASCADE, related_name="rates"
    )
    star = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_("Rating from 1 to 5"),
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rate")
        verbose_name_plural = _("Rates")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "accommodation"], name="rate_unique_user_accommodation"),
        ]
        indexes = [
            models.Index(fields=["accommodation", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"Rate by {self.user_id} for accommodation {self.accommodation_id} ({self.star})"
