"""User Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - UserCreate: name 2-50 chars, email valid address, both required
    - UserUpdate: same per-field rules, at least one field present, null never accepted
    - email is kept exactly as submitted (no case folding, no normalization)

Design Decisions:
    - EmailAddress over EmailStr: EmailStr returns the normalized address (lower-cased domain),
      which would break the "stored exactly as submitted" contract
    - Field-level messages live in error_messages, not in custom validators
"""

from datetime import datetime
from typing import ClassVar

from pydantic import Field

from postboard.schemas.common import (
    EmailAddress, InputSchema, OutputSchema, Pagination, PartialUpdateSchema,
)

_USER_MESSAGES = {
    "name.missing": "Name is required",
    "name.string_too_short": "Name must be at least 2 characters long",
    "name.string_too_long": "Name cannot exceed 50 characters",
    "name.string_type": "Name must be a string",
    "email.missing": "Email is required",
    "email.email_invalid": "Please provide a valid email address",
    "email.string_too_long": "Email cannot exceed 255 characters",
    "email.string_type": "Email must be a string",
}


class UserCreate(InputSchema):
    name: str = Field(min_length=2, max_length=50)
    email: EmailAddress

    error_messages: ClassVar[dict[str, str]] = _USER_MESSAGES


class UserUpdate(PartialUpdateSchema):
    name: str | None = Field(None, min_length=2, max_length=50)
    email: EmailAddress | None = None

    error_messages: ClassVar[dict[str, str]] = _USER_MESSAGES


class PostSummary(OutputSchema):
    """Post as embedded inside a user payload (no author back-reference)."""
    id: int
    title: str
    content: str | None
    published: bool
    created_at: datetime
    author_id: int


class UserResponse(OutputSchema):
    id: int
    name: str
    email: str
    created_at: datetime
    posts: list[PostSummary] = []


class UserListResponse(OutputSchema):
    users: list[UserResponse]
    pagination: Pagination
