# =============================================================================
# lib/supervisor.py - Process Supervisor
# =============================================================================
# Safety net for asynchronous failures that escape every request:
# - background tasks started through spawn() (e.g. the database connection)
# - exceptions the event loop reports with nobody left to handle them
#
# Failures are logged. With exit_on_error enabled the supervisor records
# exit code 1 and asks the server to shut down; otherwise the process keeps
# running.
#
# Usage:
#   supervisor = ProcessSupervisor(exit_on_error=settings.EXIT_ON_UNHANDLED_ERROR)
#   supervisor.install(asyncio.get_running_loop())
#   supervisor.spawn(connect_db(settings), name="connect-db")
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections import deque
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

MAX_RECORDED_FAILURES = 100


class ProcessSupervisor:
    """
    Top-level subscriber for otherwise uncaught asynchronous failures.

    Attributes:
        exit_on_error: Request shutdown after the first reported failure.
        exit_code: 0 until a failure triggers shutdown, then 1.
        failures: The most recent reported exceptions (oldest dropped first).
        failure_count: Number of failures reported over the process lifetime.
    """

    def __init__(
        self,
        exit_on_error: bool = False,
        shutdown_hook: Callable[[], None] | None = None,
    ) -> None:
        self.exit_on_error = exit_on_error
        self.exit_code = 0
        self.failures: deque[BaseException] = deque(maxlen=MAX_RECORDED_FAILURES)
        self.failure_count = 0
        self._shutdown_hook = shutdown_hook
        self._tasks: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous_handler: Any = None

    def set_shutdown_hook(self, hook: Callable[[], None]) -> None:
        """Replace the default shutdown action (SIGTERM to this process)."""
        self._shutdown_hook = hook

    # -------------------------------------------------------------------------
    # Event Loop Subscription
    # -------------------------------------------------------------------------

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Route the loop's unhandled exceptions to this supervisor."""
        self._loop = loop
        self._previous_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._handle_loop_exception)

    def uninstall(self) -> None:
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_handler)
            self._loop = None
            self._previous_handler = None

    def _handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
    ) -> None:
        exc = context.get("exception")
        if exc is None:
            exc = RuntimeError(context.get("message", "Unhandled event loop error"))
        self.report(exc)

    # -------------------------------------------------------------------------
    # Background Tasks
    # -------------------------------------------------------------------------

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Run coro in the background and report it if it fails."""
        task = asyncio.ensure_future(coro)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.report(exc)

    async def cancel_all(self) -> None:
        """Cancel background tasks that are still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def report(self, exc: BaseException) -> None:
        """Log an escaped failure and shut down if configured to."""
        self.failures.append(exc)
        self.failure_count += 1
        logger.error(f"Error: {exc}", exc_info=(type(exc), exc, exc.__traceback__))

        if not self.exit_on_error or self.exit_code:
            return

        self.exit_code = 1
        logger.error("Shutting down after unhandled error")
        if self._shutdown_hook is not None:
            self._shutdown_hook()
        else:
            os.kill(os.getpid(), signal.SIGTERM)
