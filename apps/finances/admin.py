from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Bank, BankDirectory, Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_code", "order", "total_amount", "paid_amount", "remaining_amount", "status")
    list_filter = ("status", "payment_type")
    search_fields = ("invoice_code",)
    raw_id_fields = ("order",)
    readonly_fields = ("invoice_code", "created_at", "updated_at")


@admin.register(BankDirectory)
class BankDirectoryAdmin(admin.ModelAdmin):
    list_display = ("bank_short_name", "bank_name")
    search_fields = ("bank_name", "bank_short_name")


@admin.register(Bank)
class BankAdmin(admin.ModelAdmin):
    list_display = ("user", "bank_short_name", "account_number", "account_name")
    search_fields = ("account_number", "account_name", "user__email")
    raw_id_fields = ("user",)
