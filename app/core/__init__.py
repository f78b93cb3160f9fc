"""
Core Application - shared infrastructure.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError, NotFoundError, PermissionDeniedError, ConflictError

Validators (import from core.validators):
    - validate_no_html: Reject HTML tags in user-visible text
    - validate_reference_code: Tracking numbers, top-up codes, bank ids

Note:
    Models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them from their modules.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .validators import validate_no_html, validate_reference_code

__all__ = [
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "validate_no_html",
    "validate_reference_code",
]
