"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin  # type: ignore
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            _("Personal info"),
            {"fields": ("username", "phone", "gender", "date_of_birth", "avatar")},
        ),
        (_("Role"), {"fields": ("role", "status", "admin", "is_verified")}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "username", "phone", "role", "admin"),
            },
        ),
    )
    list_display = ("email", "username", "role", "status", "phone", "admin", "is_active")
    list_filter = ("role", "status", "is_active")
    search_fields = ("email", "phone", "username")
    ordering = ("email",)
    readonly_fields = ("created_at", "updated_at", "date_joined")
