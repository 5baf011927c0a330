"""User domain models.

The platform differentiates four roles: ordinary users (guests who
registered), the platform super admin, admins who own accommodations and
receptionists working for a single admin. Roles are stored as integers
because the mobile and web clients already exchange them in that form.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{9,15}$",
    message=_("Invalid phone number. Use digits only, optionally prefixed with '+'."),
)


class CustomUserManager(BaseUserManager):
    """Manager that uses email as the login field."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)

        phone = extra_fields.get("phone")
        if phone:
            extra_fields["phone"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.Role.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.Role.SUPER_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Platform account with a role and an optional owning admin."""

    class Role(models.IntegerChoices):
        USER = 0, _("User")
        SUPER_ADMIN = 1, _("Super admin")
        ADMIN = 2, _("Admin")
        RECEPTIONIST = 3, _("Receptionist")

    class Status(models.IntegerChoices):
        ACTIVE = 0, _("Active")
        BANNED = 1, _("Banned")

    class Gender(models.IntegerChoices):
        MALE = 0, _("Male")
        FEMALE = 1, _("Female")
        OTHER = 2, _("Other")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        default="New User",
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.PositiveSmallIntegerField(_("Role"), choices=Role.choices, default=Role.USER)
    status = models.PositiveSmallIntegerField(_("Status"), choices=Status.choices, default=Status.ACTIVE)
    gender = models.PositiveSmallIntegerField(choices=Gender.choices, default=Gender.MALE)
    date_of_birth = models.CharField(max_length=10, default="01/01/2000", help_text=_("DD/MM/YYYY"))
    avatar = models.URLField(blank=True)
    is_verified = models.BooleanField(default=False)
    admin = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="receptionists",
        help_text=_("Admin a receptionist works for."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    def is_ordinary(self) -> bool:
        return self.role == self.Role.USER

    def is_super_admin(self) -> bool:
        return self.role == self.Role.SUPER_ADMIN or self.is_superuser

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    def is_receptionist(self) -> bool:
        return self.role == self.Role.RECEPTIONIST

    def is_staff_role(self) -> bool:
        return self.is_super_admin() or self.is_admin() or self.is_receptionist()

    @property
    def is_banned(self) -> bool:
        return self.status == self.Status.BANNED

    def owner_scope_id(self) -> int | None:
        """Id of the admin whose accommodations this user manages."""
        if self.is_admin():
            return self.pk
        if self.is_receptionist():
            return self.admin_id
        return None


User = CustomUser
