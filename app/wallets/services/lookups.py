"""
User lookups shared by the wallet services.

Handles are profile usernames, matched case-insensitively with an
optional leading "@".
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model

from core.exceptions import ValidationError
from wallets.exceptions import NotFound


def normalize_handle(handle: str | None) -> str:
    return (handle or "").strip().lstrip("@").lower()


def get_user_by_handle(handle: str | None):
    """
    Resolve a handle to an active user.

    Raises:
        NotFound: If no active user has that handle
    """
    normalized = normalize_handle(handle)
    if not normalized:
        raise ValidationError("A handle is required", error_code="HANDLE_REQUIRED")

    user = (
        get_user_model()
        .objects.filter(profile__username__iexact=normalized, is_active=True)
        .first()
    )
    if user is None:
        raise NotFound(
            f"No user with handle @{normalized}",
            error_code="USER_NOT_FOUND",
            details={"handle": normalized},
        )
    return user


def get_user_by_id(user_id: Any):
    """
    Resolve a user id to an active user.

    Raises:
        NotFound: If no active user has that id
    """
    user = get_user_model().objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise NotFound(
            f"User {user_id} not found",
            error_code="USER_NOT_FOUND",
            details={"user_id": str(user_id)},
        )
    return user


def handle_for(user) -> str:
    """Return the user's handle, falling back to the email local part."""
    profile = getattr(user, "profile", None)
    if profile is not None and profile.username:
        return profile.username
    return user.email.split("@")[0]

