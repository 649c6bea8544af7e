"""
Application lifecycle for the Vodichron HRMS backend.

The lifespan starts the background jobs, tracks in-flight requests and on
shutdown waits for them, cancels the jobs and releases the connection pool.
"""

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from typing import Callable, Optional, Set

logger = logging.getLogger("vodichron.lifecycle")


class GracefulShutdownManager:
    """Counts in-flight requests, owns background tasks and shutdown callbacks."""

    def __init__(self, timeout: int = 30):
        self._shutdown_requested = False
        self._timeout = timeout
        self._tasks: Set[asyncio.Task] = set()
        self._callbacks: list[Callable] = []
        self._in_flight = 0
        self._lock = asyncio.Lock()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    @property
    def pending_requests(self) -> int:
        return self._in_flight

    async def request_started(self) -> None:
        async with self._lock:
            self._in_flight += 1

    async def request_finished(self) -> None:
        async with self._lock:
            self._in_flight -= 1

    def add_shutdown_callback(self, callback: Callable) -> None:
        self._callbacks.append(callback)

    def track_task(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _drain_requests(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout
        while self._in_flight > 0:
            if loop.time() > deadline:
                logger.warning(f"Shutdown timeout reached with {self._in_flight} request(s) still running")
                return
            await asyncio.sleep(0.5)

    async def shutdown(self) -> None:
        if self._shutdown_requested:
            return
        self._shutdown_requested = True
        logger.info("Shutdown requested, draining requests")

        await self._drain_requests()

        if self._tasks:
            logger.info(f"Cancelling {len(self._tasks)} background task(s)")
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)

        for callback in self._callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Shutdown callback {getattr(callback, '__name__', callback)} failed: {e}")

        logger.info("Shutdown complete")


_shutdown_manager: Optional[GracefulShutdownManager] = None


def get_shutdown_manager() -> GracefulShutdownManager:
    global _shutdown_manager
    if _shutdown_manager is None:
        _shutdown_manager = GracefulShutdownManager()
    return _shutdown_manager


def setup_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """Trigger a graceful shutdown on SIGTERM and SIGINT."""
    manager = get_shutdown_manager()

    def on_signal(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}")
        manager.track_task(asyncio.create_task(manager.shutdown()))

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, lambda s=sig: on_signal(s))
        except NotImplementedError:
            signal.signal(sig, lambda s, f, sig=sig: on_signal(sig))


@asynccontextmanager
async def lifespan_manager(app):
    """FastAPI lifespan: start background jobs, tear everything down on exit."""
    from app.core.scheduled_jobs import build_scheduler
    from app.db.session import engine

    logger.info("Vodichron HRMS starting up")
    manager = get_shutdown_manager()

    try:
        setup_signal_handlers(asyncio.get_running_loop())
    except RuntimeError as e:
        logger.warning(f"Could not install signal handlers: {e}")

    scheduler = build_scheduler()
    for task in scheduler.start():
        manager.track_task(task)
    app.state.scheduler = scheduler

    async def close_database():
        await engine.dispose()
        logger.info("Database connections closed")

    manager.add_shutdown_callback(scheduler.stop)
    manager.add_shutdown_callback(close_database)

    try:
        yield
    finally:
        await manager.shutdown()


class RequestTrackingMiddleware:
    """Counts in-flight requests and answers 503 once shutdown has begun."""

    def __init__(self, app):
        self.app = app
        self.manager = get_shutdown_manager()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if self.manager.shutdown_requested:
            await send({
                "type": "http.response.start",
                "status": 503,
                "headers": [[b"content-type", b"application/json"], [b"connection", b"close"]],
            })
            await send({
                "type": "http.response.body",
                "body": b'{"success": false, "message": "Service is shutting down"}',
            })
            return

        await self.manager.request_started()
        try:
            await self.app(scope, receive, send)
        finally:
            await self.manager.request_finished()
