"""Serializers for the accommodations domain."""

from __future__ import annotations

import re

from rest_framework import serializers  # type: ignore

from apps.reviews.serializers import RateSerializer

from .models import Accommodation, Benefit, Room, VisibilityStatus

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class BenefitSerializer(serializers.ModelSerializer):
    class Meta:
        model = Benefit
        fields = ["id", "name", "status"]
        read_only_fields = ["status"]


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=VisibilityStatus.choices)


class RoomSerializer(serializers.ModelSerializer):
    benefits = serializers.PrimaryKeyRelatedField(many=True, queryset=Benefit.objects.all(), required=False)

    class Meta:
        model = Room
        fields = [
            "id",
            "accommodation",
            "name",
            "type",
            "num_bed",
            "num_toilet",
            "acreage",
            "people",
            "price",
            "description",
            "short_description",
            "avatar",
            "images",
            "furniture",
            "status",
            "benefits",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "created_at", "updated_at"]

    def validate_accommodation(self, value: Accommodation) -> Accommodation:
        if not value.is_room_based:
            raise serializers.ValidationError("Rooms can only be added to room based accommodations.")
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is not None and not user.is_super_admin() and value.owner_id != user.pk:
            raise serializers.ValidationError("You do not own this accommodation.")
        return value


class AccommodationSerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField()
    benefits = serializers.PrimaryKeyRelatedField(many=True, queryset=Benefit.objects.all(), required=False)
    rooms = serializers.SerializerMethodField()

    class Meta:
        model = Accommodation
        fields = [
            "id",
            "owner_id",
            "type",
            "name",
            "address",
            "province",
            "district",
            "ward",
            "avatar",
            "images",
            "short_description",
            "description",
            "status",
            "num",
            "furniture",
            "people",
            "price",
            "time_check_in",
            "time_check_out",
            "longitude",
            "latitude",
            "rating",
            "benefits",
            "rooms",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["status", "rating", "created_at", "updated_at"]

    def get_rooms(self, obj: Accommodation) -> list[int]:
        return [room.id for room in obj.rooms.all()]

    def _validate_time(self, value: str) -> str:
        if not _TIME_RE.match(value):
            raise serializers.ValidationError("Expected HH:MM.")
        return value

    def validate_time_check_in(self, value: str) -> str:
        return self._validate_time(value)

    def validate_time_check_out(self, value: str) -> str:
        return self._validate_time(value)


class AccommodationDetailSerializer(AccommodationSerializer):
    rates = RateSerializer(many=True, read_only=True)

    class Meta(AccommodationSerializer.Meta):
        fields = AccommodationSerializer.Meta.fields + ["rates"]
