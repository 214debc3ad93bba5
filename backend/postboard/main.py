"""Postboard API — FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure to the JSON error envelope
    - Process-wide resources (database manager, optional session store) are constructed
      here, owned by a Lifecycle on app.state, and closed by the lifespan on shutdown
    - Optional capabilities are decided once from Settings, never re-read per request

Design Decisions:
    - create_app() factory over a module-level app: tests build isolated apps with their
      own settings and session store (run with `uvicorn --factory postboard.main:create_app`
      or `python -m postboard`)
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Engine and Redis clients connect lazily, so construction here performs no I/O
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from postboard.api.error_handlers import register_error_handlers
from postboard.api.middleware import install_middleware
from postboard.api.routes import health, posts, users
from postboard.config import Settings, get_settings
from postboard.infrastructure.database import DatabaseSessionManager
from postboard.infrastructure.lifecycle import Lifecycle
from postboard.infrastructure.observability import setup_logging
from postboard.infrastructure.session_store import RedisSessionStore, SessionStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    lifecycle: Lifecycle = app.state.lifecycle
    logger.info(
        f"Postboard API started in {app.state.settings.environment} mode",
    )
    yield
    logger.info("Postboard API shutting down")
    if not await lifecycle.shutdown():
        logger.error("Shutdown completed with errors")


def build_session_store(settings: Settings) -> SessionStore | None:
    if not settings.sessions_enabled:
        return None
    return RedisSessionStore(
        settings.redis_url, ttl_seconds=settings.session_ttl_seconds,
    )


def create_app(
    settings: Settings | None = None,
    session_store: SessionStore | None = None,
) -> FastAPI:
    """Build the application. session_store overrides the one derived from settings."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if session_store is None:
        session_store = build_session_store(settings)

    app = FastAPI(
        title="Postboard API",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.lifecycle = Lifecycle(db, session_store)

    app.state.rate_limiter = install_middleware(app, settings, session_store)
    register_error_handlers(app, settings)

    # Routes, registered explicitly
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(posts.router)
    return app
