"""Post Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - PostCreate: title 3-200 chars required, content 10-5000 chars optional, published defaults False
    - PostUpdate: same per-field rules, at least one field present
    - authorId is never accepted from the body; it comes from the route
"""

from datetime import datetime
from typing import ClassVar

from pydantic import Field

from postboard.schemas.common import (
    InputSchema, OutputSchema, Pagination, PartialUpdateSchema,
)

_POST_MESSAGES = {
    "title.missing": "Title is required",
    "title.string_too_short": "Title must be at least 3 characters long",
    "title.string_too_long": "Title cannot exceed 200 characters",
    "title.string_type": "Title must be a string",
    "content.string_too_short": "Content must be at least 10 characters long",
    "content.string_too_long": "Content cannot exceed 5000 characters",
    "content.string_type": "Content must be a string",
    "published.bool_parsing": "Published must be a boolean",
    "published.bool_type": "Published must be a boolean",
}


class PostCreate(InputSchema):
    title: str = Field(min_length=3, max_length=200)
    content: str | None = Field(None, min_length=10, max_length=5000)
    published: bool = False

    error_messages: ClassVar[dict[str, str]] = _POST_MESSAGES


class PostUpdate(PartialUpdateSchema):
    title: str | None = Field(None, min_length=3, max_length=200)
    content: str | None = Field(None, min_length=10, max_length=5000)
    published: bool | None = None

    error_messages: ClassVar[dict[str, str]] = _POST_MESSAGES


class AuthorSummary(OutputSchema):
    id: int
    name: str
    email: str


class PostResponse(OutputSchema):
    id: int
    title: str
    content: str | None
    published: bool
    created_at: datetime
    author_id: int
    author: AuthorSummary


class PostListResponse(OutputSchema):
    posts: list[PostResponse]
    pagination: Pagination
