from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import AvailabilityBlock, Order


class AvailabilityBlockInline(admin.TabularInline):
    model = AvailabilityBlock
    extra = 0
    fields = ("kind", "room", "accommodation", "from_date", "to_date", "status")
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "accommodation", "user", "guest_name", "check_in", "check_out", "total_price", "status")
    list_filter = ("status",)
    search_fields = ("accommodation__name", "guest_name", "guest_phone", "user__phone")
    raw_id_fields = ("user", "accommodation")
    filter_horizontal = ("rooms",)
    readonly_fields = (
        "price",
        "holiday_price",
        "rush_price",
        "sold_out_price",
        "discount_price",
        "total_price",
        "created_at",
        "updated_at",
    )
    inlines = (AvailabilityBlockInline,)


@admin.register(AvailabilityBlock)
class AvailabilityBlockAdmin(admin.ModelAdmin):
    list_display = ("kind", "room", "accommodation", "from_date", "to_date", "status")
    list_filter = ("kind", "status")
    date_hierarchy = "from_date"
