"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import InvalidDateFormat, parse_wire_date

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Main user representation."""

    admin_id = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "phone",
            "role",
            "status",
            "gender",
            "date_of_birth",
            "avatar",
            "is_verified",
            "admin_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "status",
            "is_verified",
            "admin_id",
            "created_at",
            "updated_at",
        ]

    def validate_date_of_birth(self, value: str) -> str:
        try:
            parse_wire_date(value)
        except InvalidDateFormat as exc:
            raise serializers.ValidationError(str(exc))
        return value


class UserCreateSerializer(serializers.ModelSerializer):
    """Account creation by a super admin or an admin."""

    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR])

    class Meta:
        model = User
        fields = ["id", "email", "password", "phone", "username", "role", "gender", "date_of_birth"]
        read_only_fields = ["id"]

    def validate_role(self, value: int) -> int:
        actor = self.context["request"].user
        if actor.is_super_admin():
            return value
        if actor.is_admin() and value == User.Role.RECEPTIONIST:
            return value
        raise serializers.ValidationError("You are not allowed to create accounts with this role.")

    def validate_phone(self, value: str) -> str:
        if User.objects.filter(phone=value).exists():
            raise serializers.ValidationError("A user with this phone already exists.")
        return value

    def create(self, validated_data):  # type: ignore
        actor = self.context["request"].user
        password = validated_data.pop("password")
        if actor.is_admin():
            validated_data["admin"] = actor
        return User.objects.create_user(password=password, is_verified=True, **validated_data)


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.Status.choices)
