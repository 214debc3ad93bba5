"""Error Handlers — global exception handlers for the Postboard API.

Invariants:
    - PostboardError → its http_status and envelope {"error": {message, code, timestamp, ...context}}
    - RequestValidationError (query strings) → 400 with field-level details
    - Unmatched route (router 404/405) → 404 {"error": {message: "Route not found", path, method, timestamp}}
    - Exception (catch-all) → 500; stack only in non-production bodies, always in logs
      (normally rendered by ErrorBoundaryMiddleware; this handler covers the outer stages)
    - Every handled failure is logged at ERROR with method, path and client address

Design Decisions:
    - Four-layer handler: domain (PostboardError), validation (FastAPI), routing (HTTPException), catch-all
    - Extracted from main.py; settings passed in so the production switch is decided once
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from postboard.api.request_info import request_log_context
from postboard.config import Settings
from postboard.core.errors import PostboardError, utc_timestamp

logger = logging.getLogger(__name__)

_REQUEST_LOCATIONS = {"query", "path", "body", "header", "cookie"}


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_postboard_error_handler(app, settings)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app, settings)


def _register_postboard_error_handler(app: FastAPI, settings: Settings) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(PostboardError)
    async def postboard_error_handler(request: Request, exc: PostboardError):
        logger.error(
            f"{exc.code}: {exc.message}",
            exc_info=exc if exc.http_status >= 500 else None,
            extra={
                "error_code": exc.code,
                "status": exc.http_status,
                **request_log_context(request),
            },
        )
        content = exc.to_response()
        if exc.http_status >= 500 and not settings.is_production:
            content["error"]["stack"] = _format_stack(exc)
        headers = None
        if exc.http_status == status.HTTP_429_TOO_MANY_REQUESTS:
            headers = {"Retry-After": str(exc.context.get("retryAfter", 0))}
        return JSONResponse(
            status_code=exc.http_status, content=content, headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register FastAPI request validation error handler (query strings)."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = _build_validation_details(exc)
        logger.error(
            f"Validation error on {request.url.path}: {details}",
            extra={"error_code": "VALIDATION_ERROR", **request_log_context(request)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "message": "Validation failed",
                    "code": "VALIDATION_ERROR",
                    "timestamp": utc_timestamp(),
                    "details": details,
                },
            },
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register router-level HTTP errors (unmatched path or method)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            logger.error(
                f"Route not found: {request.method} {request.url.path}",
                extra={"error_code": "ROUTE_NOT_FOUND", **request_log_context(request)},
            )
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=not_found_response(request),
            )
        logger.error(
            f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}",
            extra={"status": exc.status_code, **request_log_context(request)},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {"message": str(exc.detail), "timestamp": utc_timestamp()},
            },
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI, settings: Settings) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=exc,
            extra={"error_code": "INTERNAL_ERROR", **request_log_context(request)},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=internal_error_response(exc, settings.is_production),
        )


def not_found_response(request: Request) -> dict:
    return {
        "error": {
            "message": "Route not found",
            "path": request.url.path,
            "method": request.method,
            "timestamp": utc_timestamp(),
        },
    }


def internal_error_response(exc: Exception, production: bool) -> dict:
    """Opaque in production; message and stack in development."""
    if production:
        return {
            "error": {
                "message": "Internal Server Error",
                "timestamp": utc_timestamp(),
            },
        }
    return {
        "error": {
            "message": str(exc) or "Internal Server Error",
            "timestamp": utc_timestamp(),
            "stack": _format_stack(exc),
        },
    }


def _format_stack(exc: BaseException) -> str:
    return "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__),
    )


def _build_validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for e in exc.errors():
        loc = list(e["loc"])
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        details.append({
            "field": ".".join(str(part) for part in loc),
            "message": e["msg"],
        })
    return details
