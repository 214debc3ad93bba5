"""Server-Side Sessions — cookie carries only an opaque id, data lives in the session store.

Invariants:
    - Installed only when a session store is configured; otherwise request.state has no session
    - Cookie is HTTP-only, SameSite=Lax, Secure in production, max-age = store TTL
    - New sessions are persisted and their cookie set; existing ones are saved when
      modified and have their TTL refreshed otherwise
    - Probe paths (/health, /ready) skip the stage so liveness never touches the store

Design Decisions:
    - Own middleware over Starlette's SessionMiddleware: that one keeps data in a
      signed client cookie, not on the server
    - secrets.token_urlsafe(32) ids: unguessable without a signing secret
"""

import logging
import secrets

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from postboard.infrastructure.session_store import SessionStore

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/ready"})


class SessionData(dict):
    """Session payload that remembers whether a handler changed it."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.modified = False

    def __setitem__(self, key, value):
        super().__setitem__(key, value)
        self.modified = True

    def __delitem__(self, key):
        super().__delitem__(key)
        self.modified = True

    def update(self, *args, **kwargs):
        super().update(*args, **kwargs)
        self.modified = True

    def pop(self, key, *default):
        self.modified = True
        return super().pop(key, *default)

    def clear(self):
        super().clear()
        self.modified = True


class ServerSideSessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        cookie_name: str = "sid",
        secure: bool = False,
    ):
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name
        self.secure = secure

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        session_id = request.cookies.get(self.cookie_name)
        data = await self.store.load(session_id) if session_id else None
        is_new = data is None
        if is_new:
            session_id = secrets.token_urlsafe(32)
            data = {}
        session = SessionData(data)
        request.state.session = session
        request.state.session_id = session_id

        response = await call_next(request)

        if is_new or session.modified:
            await self.store.save(session_id, dict(session))
        else:
            await self.store.touch(session_id)
        if is_new:
            response.set_cookie(
                self.cookie_name,
                session_id,
                max_age=self.store.ttl_seconds,
                httponly=True,
                secure=self.secure,
                samesite="lax",
            )
            logger.debug(f"Session started: {session_id[:8]}...")
        return response
