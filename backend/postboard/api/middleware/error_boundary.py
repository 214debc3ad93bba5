"""Error Boundary — turns unhandled exceptions into 500 envelopes inside the pipeline.

Invariants:
    - An exception that escapes the route before the response starts becomes the
      standard 500 envelope, so CORS, security headers and gzip still apply to it
    - The failure is logged at ERROR with method, path and client address, and is not re-raised
    - Once a response has started the exception propagates unchanged

Design Decisions:
    - Pure ASGI and installed innermost: Starlette serves Exception handlers from the
      outermost ServerErrorMiddleware, which sits outside every user middleware
    - The catch-all Exception handler stays registered for failures in the outer stages
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from postboard.api.error_handlers import internal_error_response
from postboard.api.request_info import request_log_context

logger = logging.getLogger(__name__)


class ErrorBoundaryMiddleware:
    def __init__(self, app: ASGIApp, production: bool):
        self.app = app
        self.production = production

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception as exc:
            if response_started:
                raise
            request = Request(scope)
            logger.error(
                f"Unhandled exception on {request.url.path}: {exc}",
                exc_info=exc,
                extra={"error_code": "INTERNAL_ERROR", **request_log_context(request)},
            )
            response = JSONResponse(
                status_code=500,
                content=internal_error_response(exc, self.production),
            )
            await response(scope, receive, send)
