"""Server Runner — uvicorn with graceful shutdown and fatal-error exit codes.

Invariants:
    - SIGINT/SIGTERM: stop accepting connections, drain in-flight requests, run the
      lifespan shutdown (close database and session store), then exit
    - Exit code 0 on clean shutdown; 1 if startup fails, a resource fails to close,
      or an unhandled error was observed
    - Unhandled asyncio task errors are logged at CRITICAL and trigger shutdown
    - Uncaught synchronous exceptions are logged at CRITICAL before the process dies

Design Decisions:
    - Programmatic uvicorn.Server over the CLI: the exit code depends on Lifecycle state
      that only this process knows about
    - Signal handlers stay uvicorn's own (they already drain connections); the subclass
      logs the signal and does not record it for re-raising, so run() decides the exit code
"""

import asyncio
import logging
import signal
import sys
from types import FrameType

import uvicorn

from postboard.config import Settings, get_settings
from postboard.infrastructure.lifecycle import Lifecycle
from postboard.main import create_app

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class GracefulServer(uvicorn.Server):
    """uvicorn.Server whose signals end in serve() returning, never in a re-raised signal.

    uvicorn records each handled signal and re-raises it once serving stops, which
    would kill the process (SIGTERM) or raise KeyboardInterrupt (SIGINT) before the
    exit code is decided. Signals are therefore not recorded here.
    """

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        name = signal.Signals(sig).name
        logger.info(
            f"Received {name}, shutting down gracefully", extra={"signal": name},
        )
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True


class FatalErrorMonitor:
    """Event loop exception handler: an unhandled task error is fatal."""

    def __init__(self, server: uvicorn.Server):
        self.server = server
        self.tripped = False

    def handle_async_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict,
    ) -> None:
        exc = context.get("exception")
        logger.critical(
            f"Unhandled async error: {context.get('message', exc)}",
            exc_info=exc,
        )
        self.tripped = True
        self.server.should_exit = True


def log_uncaught_exception(exc_type, exc, tb) -> None:
    """sys.excepthook: record the crash in the structured log."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical("Uncaught exception, exiting", exc_info=(exc_type, exc, tb))


async def serve(server: uvicorn.Server, lifecycle: Lifecycle) -> int:
    """Run server until it exits and translate what happened into an exit code."""
    monitor = FatalErrorMonitor(server)
    asyncio.get_running_loop().set_exception_handler(
        monitor.handle_async_exception,
    )
    await server.serve()
    if not server.started:
        logger.error("Server failed to start")
        return EXIT_FAILURE
    if monitor.tripped or lifecycle.shutdown_failed:
        return EXIT_FAILURE
    logger.info("Shutdown complete")
    return EXIT_OK


def run(settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    app = create_app(settings)
    config = uvicorn.Config(
        app, host=settings.host, port=settings.port, log_config=None,
    )
    server = GracefulServer(config)
    return asyncio.run(serve(server, app.state.lifecycle))


def main() -> None:
    sys.excepthook = log_uncaught_exception
    sys.exit(run())
