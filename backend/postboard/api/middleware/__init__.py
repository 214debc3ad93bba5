"""Middleware Pipeline — ordered cross-cutting request stages.

Execution order for every request (outermost first):
    1. SecurityHeadersMiddleware   deny-by-default headers on every response
    2. CORSMiddleware              single configured origin, credentials allowed
    3. GZipMiddleware              transparent response compression
    4. RequestLoggingMiddleware    method/path/status/latency per request
    5. RateLimitMiddleware         fixed window per client, 429 short-circuit
    6. ServerSideSessionMiddleware only when a session store is configured
    7. BodyLimitMiddleware         413 for bodies over the configured cap
    8. ErrorBoundaryMiddleware     unhandled exceptions → 500 envelope inside the stages above

Invariants:
    - Any stage may short-circuit; later stages and the route then never run
    - The session stage is decided once at startup, never per request
    - Unhandled 500s pass back through every stage above the boundary, so they carry
      CORS and security headers like any other response

Design Decisions:
    - Starlette's add_middleware makes the LAST added middleware outermost, so stages
      are added in reverse of the order above
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from postboard.api.middleware.body_limit import BodyLimitMiddleware
from postboard.api.middleware.error_boundary import ErrorBoundaryMiddleware
from postboard.api.middleware.rate_limit import (
    FixedWindowRateLimiter, RateLimitMiddleware,
)
from postboard.api.middleware.request_logging import RequestLoggingMiddleware
from postboard.api.middleware.security_headers import SecurityHeadersMiddleware
from postboard.api.middleware.sessions import ServerSideSessionMiddleware
from postboard.config import Settings
from postboard.infrastructure.session_store import SessionStore

logger = logging.getLogger(__name__)

GZIP_MINIMUM_SIZE = 1000


def install_middleware(
    app: FastAPI,
    settings: Settings,
    session_store: SessionStore | None = None,
) -> FixedWindowRateLimiter:
    """Install every pipeline stage on app. Returns the rate limiter for inspection."""
    limiter = FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.add_middleware(ErrorBoundaryMiddleware, production=settings.is_production)
    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.body_limit_bytes)
    if session_store is not None:
        app.add_middleware(
            ServerSideSessionMiddleware,
            store=session_store,
            cookie_name=settings.session_cookie_name,
            secure=settings.is_production,
        )
    else:
        logger.info("No session store configured; sessions disabled")
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    return limiter
