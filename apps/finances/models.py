"""Financial domain models: invoices and bank accounts."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MONEY = {"max_digits": 14, "decimal_places": 2, "default": Decimal("0.00")}


class Invoice(models.Model):
    """Issued once when an order is confirmed."""

    class Status(models.IntegerChoices):
        UNPAID = 0, _("Unpaid")
        PAID = 1, _("Paid")

    class PaymentType(models.IntegerChoices):
        CASH = 0, _("Cash")
        TRANSFER = 1, _("Bank transfer")
        CARD = 2, _("Card")

    invoice_code = models.CharField(max_length=16, unique=True, editable=False)
    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="invoice",
    )
    total_amount = models.DecimalField(**MONEY)
    paid_amount = models.DecimalField(**MONEY)
    remaining_amount = models.DecimalField(**MONEY)
    status = models.PositiveSmallIntegerField(choices=Status.choices, default=Status.UNPAID)
    payment_type = models.PositiveSmallIntegerField(choices=PaymentType.choices, null=True, blank=True)
    payment_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Invoice")
        verbose_name_plural = _("Invoices")
        ordering = ["-updated_at"]

    def __str__(self) -> str:
        return f"Invoice {self.invoice_code} for order {self.order_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.invoice_code:
            self.invoice_code = self.generate_invoice_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_invoice_code() -> str:
        return f"INV{secrets.token_hex(4).upper()}"

    def mark_paid(self, payment_type: int) -> None:
        self.status = self.Status.PAID
        self.payment_type = payment_type
        self.payment_date = timezone.now()
        self.save(update_fields=["status", "payment_type", "payment_date", "updated_at"])


class BankDirectory(models.Model):
    """Known banks with the account numbers the platform receives money on."""

    bank_name = models.CharField(max_length=255)
    bank_short_name = models.CharField(max_length=32, unique=True)
    account_numbers = models.JSONField(default=list)
    icon = models.URLField(blank=True)

    class Meta:
        verbose_name = _("Bank")
        verbose_name_plural = _("Banks")
        ordering = ["bank_short_name"]

    def __str__(self) -> str:
        return self.bank_short_name


class Bank(models.Model):
    """Payout account of an admin."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="banks")
    bank_name = models.CharField(max_length=255)
    bank_short_name = models.CharField(max_length=32)
    account_number = models.CharField(max_length=32)
    account_name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Bank account")
        verbose_name_plural = _("Bank accounts")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "account_number"], name="unique_user_bank_account"),
        ]

    def __str__(self) -> str:
        return f"{self.bank_short_name} {self.account_number}"
