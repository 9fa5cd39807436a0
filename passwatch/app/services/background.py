# passwatch/app/services/background.py
"""
Detached units of work that must never delay or fail the request that
started them.

The login endpoint uses this to run IP tracking and the security alert
after the token has been built: the response goes out immediately, and any
error in the detached work is reported to the runner's logger instead of
reaching the client.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set


class BackgroundRunner:
    """
    Spawns fire-and-forget asyncio tasks.

    Strong references to running tasks are kept until they finish (the
    event loop only keeps weak ones), and every failure is logged through
    the injected logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._tasks: Set[asyncio.Task] = set()

    def spawn(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        name: Optional[str] = None,
        **kwargs: Any,
    ) -> asyncio.Task:
        task = asyncio.create_task(self._guarded(func, args, kwargs, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, func, args, kwargs, name: Optional[str]) -> Any:
        try:
            return await func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(
                f"Background task {name or func.__name__} failed: {e}",
                exc_info=True,
                extra={"event": "background_task_failed", "task": name or func.__name__},
            )
            return None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every task spawned so far (used at shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
