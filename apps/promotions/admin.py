"""Admin registrations for promotions."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Discount, Holiday, UserDiscount


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ("name", "from_date", "to_date", "price")
    search_fields = ("name",)
    ordering = ("from_sort",)


class UserDiscountInline(admin.TabularInline):
    model = UserDiscount
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ("name", "discount", "quantity", "from_date", "to_date", "status")
    list_filter = ("status",)
    search_fields = ("name",)
    inlines = (UserDiscountInline,)
