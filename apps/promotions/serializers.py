"""Serializers for holidays and discounts."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import InvalidDateFormat, parse_wire_date

from .models import Discount, Holiday

User = get_user_model()


class DateRangeValidationMixin:
    """Both dates must parse and the range must end after it starts."""

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        attrs = super().validate(attrs)  # type: ignore[misc]
        instance = getattr(self, "instance", None)
        from_raw = attrs.get("from_date", getattr(instance, "from_date", None))
        to_raw = attrs.get("to_date", getattr(instance, "to_date", None))
        errors = {}
        try:
            start = parse_wire_date(from_raw)
        except InvalidDateFormat as exc:
            errors["from_date"] = str(exc)
        try:
            end = parse_wire_date(to_raw)
        except InvalidDateFormat as exc:
            errors["to_date"] = str(exc)
        if errors:
            raise serializers.ValidationError(errors)
        if end <= start:
            raise serializers.ValidationError({"to_date": "End date must be after start date."})
        return attrs


class HolidaySerializer(DateRangeValidationMixin, serializers.ModelSerializer):
    class Meta:
        model = Holiday
        fields = ["id", "name", "from_date", "to_date", "price", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]


class DiscountSerializer(DateRangeValidationMixin, serializers.ModelSerializer):
    discount = serializers.IntegerField(min_value=0, max_value=100)

    class Meta:
        model = Discount
        fields = [
            "id",
            "name",
            "description",
            "quantity",
            "from_date",
            "to_date",
            "discount",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "created_at", "updated_at"]


class DiscountStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Discount.Status.choices)


class DiscountAssignSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)

    def validate_user_ids(self, value: list[int]) -> list[int]:
        found = set(User.objects.filter(pk__in=value).values_list("pk", flat=True))
        missing = sorted(set(value) - found)
        if missing:
            raise serializers.ValidationError(f"Unknown users: {missing}")
        return value


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
