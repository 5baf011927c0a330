"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    phone = serializers.CharField(validators=[PHONE_VALIDATOR])
    password = serializers.CharField(min_length=8, write_only=True)
    password_confirm = serializers.CharField(min_length=8, write_only=True)
    username = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("password") != attrs.get("password_confirm"):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        if User.objects.filter(email__iexact=attrs["email"]).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})
        if User.objects.filter(phone=attrs["phone"]).exists():
            raise serializers.ValidationError({"phone": "A user with this phone already exists."})
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        # self registration always produces an ordinary user
        return User.objects.create_user(password=password, role=User.Role.USER, **validated_data)


class LoginSerializer(serializers.Serializer):
    login = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        login = attrs.get("login", "")
        try:
            if "@" in login:
                user = User.objects.get(email__iexact=login)
            else:
                user = User.objects.get(phone=login)
        except User.DoesNotExist:
            raise serializers.ValidationError({"login": "Invalid login or password."})

        if not user.check_password(attrs.get("password", "")):
            raise serializers.ValidationError({"login": "Invalid login or password."})
        if user.is_banned or not user.is_active:
            raise serializers.ValidationError({"non_field_errors": ["This account is banned."]})

        attrs["user"] = user
        return attrs
