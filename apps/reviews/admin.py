"""Admin registration for rates."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Rate


@admin.register(Rate)
class RateAdmin(admin.ModelAdmin):
    list_display = ("accommodation", "user", "star", "created_at")
    list_filter = ("star",)
    search_fields = ("accommodation__name", "user__email", "comment")
    raw_id_fields = ("user", "accommodation")
