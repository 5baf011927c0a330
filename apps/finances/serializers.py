"""Serializers for invoices and banks."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Bank, BankDirectory, Invoice
from .services import AccountNumberError, validate_account_numbers


class InvoiceSerializer(serializers.ModelSerializer):
    order_id = serializers.ReadOnlyField()
    accommodation_name = serializers.CharField(source="order.accommodation.name", read_only=True)
    customer_name = serializers.CharField(source="order.contact_name", read_only=True)
    customer_phone = serializers.CharField(source="order.contact_phone", read_only=True)
    payment_type_display = serializers.CharField(source="get_payment_type_display", read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_code",
            "order_id",
            "accommodation_name",
            "customer_name",
            "customer_phone",
            "total_amount",
            "paid_amount",
            "remaining_amount",
            "status",
            "payment_type",
            "payment_type_display",
            "payment_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InvoicePaymentSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=Invoice.PaymentType.choices)


class BankDirectorySerializer(serializers.ModelSerializer):
    account_numbers = serializers.ListField(child=serializers.CharField(max_length=32), allow_empty=False)

    class Meta:
        model = BankDirectory
        fields = ["id", "bank_name", "bank_short_name", "account_numbers", "icon"]

    def validate_bank_short_name(self, value: str) -> str:
        value = value.upper()
        if BankDirectory.objects.filter(bank_short_name=value).exists():
            raise serializers.ValidationError("A bank with this short name already exists.")
        return value

    def validate_bank_name(self, value: str) -> str:
        if BankDirectory.objects.filter(bank_name=value).exists():
            raise serializers.ValidationError("A bank with this name already exists.")
        return value

    def validate(self, attrs):  # type: ignore
        try:
            validate_account_numbers(attrs["bank_short_name"], attrs["account_numbers"])
        except AccountNumberError as exc:
            raise serializers.ValidationError({"account_numbers": str(exc)})
        return attrs


class AccountNumbersSerializer(serializers.Serializer):
    account_numbers = serializers.ListField(child=serializers.CharField(max_length=32), allow_empty=False)

    def validate(self, attrs):  # type: ignore
        bank: BankDirectory = self.context["bank"]
        new_numbers = attrs["account_numbers"]
        existing = set(bank.account_numbers)
        already = [number for number in new_numbers if number in existing]
        if already:
            raise serializers.ValidationError({"account_numbers": f"Already registered: {', '.join(already)}."})
        try:
            attrs["account_numbers"] = validate_account_numbers(
                bank.bank_short_name, list(bank.account_numbers) + list(new_numbers)
            )
        except AccountNumberError as exc:
            raise serializers.ValidationError({"account_numbers": str(exc)})
        return attrs


class BankSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bank
        fields = ["id", "bank_name", "bank_short_name", "account_number", "account_name", "created_at"]
        read_only_fields = ["created_at"]

    def validate_bank_short_name(self, value: str) -> str:
        return value.upper()

    def validate(self, attrs):  # type: ignore
        try:
            validate_account_numbers(attrs["bank_short_name"], [attrs["account_number"]])
        except AccountNumberError as exc:
            raise serializers.ValidationError({"account_number": str(exc)})
        user = self.context["request"].user
        if Bank.objects.filter(user=user, account_number=attrs["account_number"]).exists():
            raise serializers.ValidationError({"account_number": "This account is already registered."})
        return attrs
