"""Request Logging — one structured log line per request.

Invariants:
    - Every request is logged with method, path, status, latency_ms and client
    - 5xx responses and raised exceptions log at ERROR, 4xx at WARNING, the rest at INFO
    - Exceptions are logged and re-raised, never swallowed
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from postboard.api.request_info import request_log_context

logger = logging.getLogger("postboard.http")


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        context = request_log_context(request)
        try:
            response = await call_next(request)
        except Exception:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.error(
                f"{request.method} {request.url.path} failed after {latency_ms}ms",
                exc_info=True,
                extra={**context, "status": 500, "latency_ms": latency_ms},
            )
            raise
        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.log(
            level_for_status(response.status_code),
            f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms",
            extra={
                **context,
                "status": response.status_code,
                "latency_ms": latency_ms,
            },
        )
        return response
