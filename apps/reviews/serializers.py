"""Serializers for rates.

Reads embed a short author card; writes take the author from the request.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.accommodations.models import Accommodation, VisibilityStatus

from .models import Rate


class RateAuthorSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source="username")
    avatar = serializers.CharField()


class RateSerializer(serializers.ModelSerializer):
    accommodation_id = serializers.ReadOnlyField()
    user = RateAuthorSerializer(read_only=True)

    class Meta:
        model = Rate
        fields = ["id", "accommodation_id", "star", "comment", "user", "created_at", "updated_at"]


class RateCreateSerializer(serializers.ModelSerializer):
    accommodation = serializers.PrimaryKeyRelatedField(
        queryset=Accommodation.objects.filter(status=VisibilityStatus.ACTIVE)
    )

    class Meta:
        model = Rate
        fields = ["accommodation", "star", "comment"]

    def validate(self, attrs: dict) -> dict:  # type: ignore
        user = self.context["request"].user
        if Rate.objects.filter(user=user, accommodation=attrs["accommodation"]).exists():
            raise serializers.ValidationError({"accommodation": "You have already rated this accommodation."})
        return attrs


class RateUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Rate
        fields = ["star", "comment"]
