"""Role based permission classes shared by all API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def _is_super_admin(user) -> bool:
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_super_admin") and user.is_super_admin()


class IsSuperAdmin(permissions.BasePermission):
    """Only the platform super admin."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and _is_super_admin(user))


class IsManager(permissions.BasePermission):
    """Super admins and admins (accommodation owners)."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if _is_super_admin(user):
            return True
        return hasattr(user, "is_admin") and user.is_admin()


class IsStaffRole(permissions.BasePermission):
    """Super admins, admins and receptionists."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return hasattr(user, "is_staff_role") and user.is_staff_role()


class IsManagerOrReadOnly(IsManager):
    """Anyone may read; writes are reserved for managers."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_permission(request, view)
