"""Admin registrations for the accommodations domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Accommodation, Benefit, Room


@admin.register(Benefit)
class BenefitAdmin(admin.ModelAdmin):
    list_display = ("name", "status")
    list_filter = ("status",)
    search_fields = ("name",)


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("name", "type", "people", "price", "status")


@admin.register(Accommodation)
class AccommodationAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "province", "district", "status", "price", "owner")
    list_filter = ("status", "type", "province")
    search_fields = ("name", "address", "owner__email")
    inlines = (RoomInline,)
    filter_horizontal = ("benefits",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "accommodation", "type", "people", "price", "status")
    list_filter = ("status", "type")
    search_fields = ("name", "accommodation__name")
    filter_horizontal = ("benefits",)
