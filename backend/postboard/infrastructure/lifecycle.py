"""Lifecycle — owns the process-wide connections and their start/stop.

Invariants:
    - Exactly one Lifecycle per application, stored on app.state.lifecycle
    - Liveness data (uptime, memory) never touches external dependencies
    - Readiness requires a database round-trip; the session store is reported, not gated
    - shutdown() closes every resource even if an earlier close fails, and reports failure

Design Decisions:
    - Explicit owner object over module globals: resources are injected into handlers
      via dependencies and closed by the lifespan (ADR: lifecycle tied to process start/stop)
    - resource.getrusage for memory: stdlib, no extra dependency for a single number
"""

import logging
import resource
import time
from dataclasses import dataclass, field
from typing import Callable

from postboard.infrastructure.database import DatabaseSessionManager
from postboard.infrastructure.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class ReadinessReport:
    ready: bool
    checks: dict[str, str] = field(default_factory=dict)
    error: str | None = None


class Lifecycle:
    """Process-wide resources: database manager and optional session store."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        session_store: SessionStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.session_store = session_store
        self._clock = clock
        self._started_at = clock()
        self.shutdown_failed = False

    def uptime_seconds(self) -> float:
        return round(self._clock() - self._started_at, 3)

    def memory_usage(self) -> dict[str, int]:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        return {"maxRss": usage.ru_maxrss}

    async def check_readiness(self) -> ReadinessReport:
        """Database round-trip plus session store connectivity (when configured)."""
        error = await self.db.health_check()
        if error is not None:
            return ReadinessReport(ready=False, error=error)
        checks = {"database": "healthy"}
        if self.session_store is not None:
            connected = await self.session_store.ping()
            checks["sessionStore"] = "connected" if connected else "disconnected"
        return ReadinessReport(ready=True, checks=checks)

    async def shutdown(self) -> bool:
        """Close database and session store. Returns False if any close failed."""
        ok = True
        try:
            await self.db.close()
            logger.info("Database connections closed")
        except Exception:
            logger.error("Failed to close database connections", exc_info=True)
            ok = False
        if self.session_store is not None:
            try:
                await self.session_store.close()
                logger.info("Session store connection closed")
            except Exception:
                logger.error("Failed to close session store", exc_info=True)
                ok = False
        self.shutdown_failed = not ok
        return ok
