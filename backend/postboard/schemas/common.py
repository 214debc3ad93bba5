"""Shared schema building blocks — wire casing, email type and pagination block.

Invariants:
    - Python attributes are snake_case; JSON keys are camelCase (createdAt, authorId)
    - Input schemas reject unknown fields
    - EmailAddress is syntax-checked by email-validator but kept exactly as submitted

Design Decisions:
    - alias_generator over per-field aliases: one rule for every schema
    - error_messages ClassVar: declarative "<field>.<pydantic error type>" -> message
      table read by the generic validator (api/validation.py)
    - email-validator called directly instead of EmailStr: EmailStr returns the
      normalized address (lower-cased domain), and stored emails must match the input
"""

from typing import Annotated, ClassVar

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo,
    field_validator, model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

MAX_ID = 2_147_483_647


def check_email_syntax(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise PydanticCustomError(
            "email_invalid", "value is not a valid email address: {reason}",
            {"reason": str(e)},
        ) from e
    return value


EmailAddress = Annotated[str, Field(max_length=255), AfterValidator(check_email_syntax)]


class InputSchema(BaseModel):
    """Base for request payloads validated by validate()."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid",
    )

    error_messages: ClassVar[dict[str, str]] = {}


class PartialUpdateSchema(InputSchema):
    """Base for PUT payloads: fields may be omitted, never null, and at least one is required."""

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        if value is None:
            raise PydanticCustomError(
                "not_nullable", "{field} cannot be null",
                {"field": info.field_name},
            )
        return value

    @model_validator(mode="after")
    def require_any_field(self):
        if not self.model_fields_set:
            raise PydanticCustomError(
                "at_least_one_field", "At least one field must be provided",
            )
        return self


class OutputSchema(BaseModel):
    """Base for response payloads built from ORM objects."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


class Pagination(OutputSchema):
    page: int
    limit: int
    total: int
    pages: int


class IdParams(InputSchema):
    """Route parameter /{id}: positive integer that fits the INTEGER primary key."""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(gt=0, le=MAX_ID)

    error_messages: ClassVar[dict[str, str]] = {
        "id.int_parsing": "ID must be a number",
        "id.int_from_float": "ID must be an integer",
        "id.greater_than": "ID must be a positive integer",
        "id.less_than_equal": f"ID cannot exceed {MAX_ID}",
        "id.missing": "ID is required",
    }
