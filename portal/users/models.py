"""
Portal User Models

This module defines the user-related models for the membership portal.

Models:
- User: Custom user keyed by a unique email address, with a display name
- PasswordResetToken: Single-use token for the forgot-password flow

Users are created at signup and mutated only by the password reset flow;
they are never hard-deleted in normal operation.

Author: Portal Development Team
Version: 1.0.0
"""

import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

__all__ = ["User", "UserManager", "PasswordResetToken"]


class UserManager(BaseUserManager):
    """Manager for the email-keyed user model."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields):
        if not email:
            raise ValueError("The email address must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Portal user identified by email.

    Attributes:
        email: Unique login identifier (stored lower-cased)
        name: Display name used in emails and on the dashboard

    Django's ``username``, ``first_name`` and ``last_name`` columns are not
    used; ``date_joined`` is the creation timestamp.
    """

    username = None
    first_name = None
    last_name = None

    email = models.EmailField(
        unique=True,
        verbose_name=_("Email"),
        help_text=_("Unique email address used to log in"),
    )

    name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        verbose_name=_("Name"),
        help_text=_("Display name"),
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        db_table = "portal_user"

    def __str__(self) -> str:
        return self.email

    def get_full_name(self) -> str:
        return self.name or self.email

    def get_short_name(self) -> str:
        return self.first_and_last_name[0] or self.email

    @property
    def first_and_last_name(self) -> tuple[str, str]:
        """Split the display name for CRM contact attributes."""
        parts = (self.name or "").split(" ")
        first = parts[0] if parts and parts[0] else self.name
        return first, " ".join(parts[1:])


def _generate_reset_token() -> str:
    return secrets.token_hex(32)


def _default_expiry():
    return timezone.now() + timedelta(seconds=settings.PASSWORD_RESET_TIMEOUT)


class PasswordResetToken(models.Model):
    """
    Single-use password reset token.

    Tokens are keyed by email rather than user id so that a request for an
    unknown address leaves no trace. Issuing a new token deletes the older
    ones for the same email.
    """

    email = models.EmailField(db_index=True, verbose_name=_("Email"))
    token = models.CharField(
        max_length=64,
        unique=True,
        default=_generate_reset_token,
        verbose_name=_("Token"),
    )
    expires = models.DateTimeField(default=_default_expiry, verbose_name=_("Expires"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Password Reset Token")
        verbose_name_plural = _("Password Reset Tokens")
        db_table = "portal_password_reset_token"

    def __str__(self) -> str:
        return f"Reset token for {self.email}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires
