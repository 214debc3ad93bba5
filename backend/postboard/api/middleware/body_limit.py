"""Body Size Limit — caps JSON and form bodies before handlers parse them.

Invariants:
    - A declared Content-Length above max_bytes is rejected with 413 without reading the body
    - Streamed (chunked) bodies are counted as they are received; crossing the limit raises
      PayloadTooLargeError inside the handler, which the error handlers turn into 413

Design Decisions:
    - Pure ASGI middleware: BaseHTTPMiddleware cannot wrap the receive channel
"""

import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from postboard.core.errors import PayloadTooLargeError

logger = logging.getLogger(__name__)


class BodyLimitMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_bytes:
            error = PayloadTooLargeError(self.max_bytes)
            logger.warning(
                f"Rejected body of {declared} bytes on {scope.get('path')}",
                extra={"error_code": error.code, "path": scope.get("path")},
            )
            response = JSONResponse(
                status_code=error.http_status, content=error.to_response(),
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLargeError(self.max_bytes)
            return message

        await self.app(scope, limited_receive, send)
