"""Serializers for orders."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import WIRE_DATE_FORMAT

from .models import Order


class WireDateField(serializers.DateField):
    def __init__(self, **kwargs):  # type: ignore
        kwargs.setdefault("format", WIRE_DATE_FORMAT)
        kwargs.setdefault("input_formats", [WIRE_DATE_FORMAT])
        super().__init__(**kwargs)


class OrderCreateSerializer(serializers.Serializer):
    accommodation_id = serializers.IntegerField(min_value=1)
    room_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, default=list)
    check_in_date = WireDateField()
    check_out_date = WireDateField()
    guest_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    guest_email = serializers.EmailField(required=False, allow_blank=True, default="")
    guest_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    user_id = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)

    def validate(self, attrs):  # type: ignore
        if attrs["check_out_date"] <= attrs["check_in_date"]:
            raise serializers.ValidationError({"check_out_date": "Check-out date must be after check-in date."})
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            missing = [field for field in ("guest_name", "guest_phone") if not attrs.get(field)]
            if missing:
                raise serializers.ValidationError({field: "This field is required." for field in missing})
        return attrs


class OrderSerializer(serializers.ModelSerializer):
    check_in = WireDateField(read_only=True)
    check_out = WireDateField(read_only=True)
    accommodation_name = serializers.CharField(source="accommodation.name", read_only=True)
    room_ids = serializers.PrimaryKeyRelatedField(source="rooms", many=True, read_only=True)
    nights = serializers.IntegerField(read_only=True)
    contact_name = serializers.CharField(read_only=True)
    contact_email = serializers.CharField(read_only=True)
    contact_phone = serializers.CharField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "accommodation_id",
            "accommodation_name",
            "room_ids",
            "check_in",
            "check_out",
            "nights",
            "contact_name",
            "contact_email",
            "contact_phone",
            "price",
            "holiday_price",
            "rush_price",
            "sold_out_price",
            "discount_price",
            "total_price",
            "status",
            "status_display",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderHistorySerializer(OrderSerializer):
    invoice_code = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["invoice_code"]
        read_only_fields = fields

    def get_invoice_code(self, obj: Order):  # type: ignore
        invoice = getattr(obj, "invoice", None)
        return invoice.invoice_code if invoice else None


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    paid_amount = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
    )
