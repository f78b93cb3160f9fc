"""
Account models.

- User: Email-identified account; staff users act as wallet administrators
- Profile: Public @handle and display name used to address payments

Related files:
    - managers.py: Email-based user creation
    - signals.py: Auto-create profile on user creation
"""

import re

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower

from authentication.managers import UserManager
from core.models import BaseModel

# Handles that would be confusing as payment recipients
RESERVED_HANDLES = frozenset([
    "admin", "administrator", "root", "system", "api", "support",
    "help", "security", "staff", "wallet", "wallets", "escrow",
    "payments", "payouts", "bank", "treasury", "null", "undefined",
])


def validate_handle_not_reserved(value):
    if value.lower() in RESERVED_HANDLES:
        raise ValidationError(f"The handle '{value}' is reserved.")


def validate_handle_format(value):
    """Handles are 3-30 characters: letters, digits, underscore, hyphen."""
    if not re.match(r"^[a-zA-Z0-9_-]{3,30}$", value):
        raise ValidationError(
            "Handle must be 3-30 characters and contain only "
            "letters, numbers, underscores, and hyphens."
        )


class User(AbstractBaseUser, PermissionsMixin):
    """
    Account holder identified by email.

    Every user may own one wallet (created on first credit). Users with
    is_staff=True can decide pending transactions, review tracking and
    release escrow.

    Usage:
        user = User.objects.create_user(email="ana@example.com", password="...")
        admin = User.objects.create_superuser(email="ops@example.com", password="...")
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="Login email address",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive users cannot log in or receive payments.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can administer wallets and orders.",
    )
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def handle(self):
        """Payment handle, empty until the profile sets one."""
        try:
            return self.profile.username
        except Profile.DoesNotExist:
            return ""


class Profile(BaseModel):
    """
    Public identity of a user.

    Fields:
        user: OneToOne link to User (also the primary key)
        username: Unique @handle, stored lowercase
        first_name / last_name: Display name

    Note:
        Created automatically by signals.create_user_profile.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        primary_key=True,
    )
    username = models.CharField(
        max_length=30,
        blank=True,
        db_index=True,
        validators=[validate_handle_format, validate_handle_not_reserved],
        help_text="Payment handle (3-30 chars, alphanumeric + _ + -)",
    )
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "authentication_profile"
        constraints = [
            models.UniqueConstraint(
                Lower("username"),
                name="unique_handle_case_insensitive",
                condition=models.Q(username__gt=""),
            ),
        ]

    def __str__(self):
        return self.username or str(self.user)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def save(self, *args, **kwargs):
        if self.username:
            self.username = self.username.lower()
        super().save(*args, **kwargs)
