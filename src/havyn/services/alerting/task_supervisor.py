"""
Background Task Supervisor

Owns the detached tasks of the alert flow: escalations and
per-recipient deliveries.

SAFETY-CRITICAL: A task spawned here outlives the HTTP request that
started it. The event loop only keeps weak references to tasks, so
the supervisor holds strong ones until each task finishes; otherwise
an alert waiting out its retry delay could be garbage collected.
"""

import asyncio
from typing import Any, Coroutine, Optional

from havyn.config.logging_config import get_logger
from havyn.infrastructure.metrics import set_background_tasks

logger = get_logger(__name__)


class TaskSupervisor:
    """
    Application-owned registry of fire-and-forget tasks.

    Usage:
        supervisor = TaskSupervisor()
        supervisor.spawn(pipeline.deliver(recipient, payload), name="deliver")
        ...
        await supervisor.shutdown(timeout=35.0)
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Number of tasks still running."""
        return len(self._tasks)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        name: Optional[str] = None,
    ) -> asyncio.Task:
        """
        Schedule a coroutine on the running loop and return immediately.

        Must be called from inside the event loop.

        Raises:
            RuntimeError: The supervisor has been shut down
        """
        if self._closed:
            coro.close()
            raise RuntimeError("TaskSupervisor is shut down")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise

        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        set_background_tasks(len(self._tasks))
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        set_background_tasks(len(self._tasks))

        if task.cancelled():
            logger.warning("Background task cancelled", task=task.get_name())
            return

        error = task.exception()
        if error is not None:
            logger.error(
                "Background task failed",
                task=task.get_name(),
                error=str(error),
                error_type=type(error).__name__,
            )

    async def drain(self) -> None:
        """
        Wait until no tasks are in flight.

        Tasks spawned by running tasks (an escalation spawning its
        deliveries) are awaited too.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float) -> None:
        """
        Stop accepting work, wait up to `timeout` seconds, then cancel.

        Args:
            timeout: Grace period for in-flight alerts
        """
        self._closed = True
        if not self._tasks:
            return

        logger.info("Draining background tasks", pending=len(self._tasks))

        try:
            await asyncio.wait_for(self.drain(), timeout=timeout)
        except asyncio.TimeoutError:
            remaining = list(self._tasks)
            logger.error(
                "Background tasks still running at shutdown, cancelling",
                pending=len(remaining),
            )
            for task in remaining:
                task.cancel()
            await asyncio.gather(*remaining, return_exceptions=True)
