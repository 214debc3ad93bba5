"""Rate Limiting — fixed window request budget per client address.

Invariants:
    - Each client gets max_requests per window_seconds; the window starts at its first request
    - Exceeding the budget returns 429 with retryAfter (seconds) and never reaches a route
    - RateLimit-Limit / RateLimit-Remaining / RateLimit-Reset headers on every response
    - Expired windows are swept at most once per window, so the table stays bounded

Design Decisions:
    - In-process dict over Redis: single-process server, mutated only between awaits
    - Limiter separated from middleware: the window arithmetic is tested with a fake clock
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from postboard.api.request_info import client_address, request_log_context
from postboard.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int = 0


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._next_sweep = clock() + window_seconds

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for key and decide whether it may proceed."""
        now = self._clock()
        self._sweep(now)
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window
        reset_after = max(
            1, math.ceil(window.started_at + self.window_seconds - now),
        )
        if window.count >= self.max_requests:
            return RateLimitDecision(False, self.max_requests, 0, reset_after)
        window.count += 1
        return RateLimitDecision(
            True, self.max_requests, self.max_requests - window.count, reset_after,
        )

    def tracked_clients(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        expired = [
            key for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window_seconds


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        decision = self.limiter.hit(client_address(request))
        if decision.allowed:
            response = await call_next(request)
        else:
            error = RateLimitExceededError(decision.reset_after)
            logger.warning(
                f"Rate limit exceeded for {client_address(request)}",
                extra={"error_code": error.code, **request_log_context(request)},
            )
            response = JSONResponse(
                status_code=error.http_status,
                content=error.to_response(),
                headers={"Retry-After": str(decision.reset_after)},
            )
        response.headers.update(decision.headers())
        return response
