"""Request Validation — one generic validator for every declarative schema.

Invariants:
    - validate(schema, location) returns a FastAPI dependency; location is "body" or "params"
    - Invalid input raises InputValidationError listing every failing field ({field, message})
    - Pydantic errors never escape this boundary
    - Valid input is returned as the schema instance (type coercion only)

Design Decisions:
    - Dependency factory over request-wide middleware: validation runs per route,
      after path matching, before the handler body (ADR: explicit per-endpoint contracts)
    - Messages resolved from schema.error_messages["<field>.<error type>"], falling
      back to pydantic's own message
    - Unsupported or missing content types validate an empty object, so required
      fields are reported as missing rather than as a parsing failure
"""

import json
import logging
from typing import Awaitable, Callable, Literal, TypeVar

from fastapi import Request
from pydantic import ValidationError

from postboard.core.errors import InputValidationError, MalformedBodyError
from postboard.schemas.common import InputSchema

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=InputSchema)
Location = Literal["body", "params"]

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_body(request: Request) -> object:
    """Decode a JSON or form body; anything else is treated as empty."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip()
    if content_type == "application/json" or content_type.endswith("+json"):
        raw = await request.body()
        if not raw.strip():
            return {}
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedBodyError("invalid JSON") from e
    if content_type in _FORM_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    return {}


def format_validation_errors(
    schema: type[InputSchema], exc: ValidationError, location: Location,
) -> list[dict[str, str]]:
    """Map pydantic errors to [{field, message}] using the schema's message table."""
    details = []
    for error in exc.errors(include_url=False):
        field = ".".join(str(part) for part in error["loc"]) or location
        message = schema.error_messages.get(
            f"{field}.{error['type']}", error["msg"],
        )
        details.append({"field": field, "message": message})
    return details


def validate(
    schema: type[SchemaT], location: Location = "body",
) -> Callable[[Request], Awaitable[SchemaT]]:
    """Build a dependency that validates one request location against schema."""

    async def dependency(request: Request) -> SchemaT:
        if location == "body":
            data = await read_body(request)
        else:
            data = dict(request.path_params)
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            details = format_validation_errors(schema, e, location)
            logger.warning(
                f"Validation failed on {request.method} {request.url.path}: {details}",
            )
            raise InputValidationError(details) from e

    dependency.__name__ = f"validate_{schema.__name__}_{location}"
    return dependency
