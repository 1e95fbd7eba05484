"""
Cancellable task handles for scenario workloads.

A TaskScope owns every background task a scenario spawns. Leaving the scope
cancels the shared token, cancels any task still running and awaits them all,
so no loop can outlive its scenario.
"""
import asyncio
from typing import Any, Coroutine, List, Optional

from perf_validation.util.log_config import setup_logger

logger = setup_logger(__name__)


class CancellationToken:

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to `seconds`. Returns True if cancelled meanwhile."""
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(0.0, seconds))
            return True
        except asyncio.TimeoutError:
            return False


class TaskScope:
    """
    Async context manager tracking child tasks.

    Exceptions raised by children (other than cancellation) are re-raised on a
    clean scope exit; if the scope is already unwinding from an error they are
    logged and the original error propagates.
    """

    def __init__(self, name: str = "scope"):
        self.name = name
        self.token = CancellationToken()
        self._tasks: List[asyncio.Task] = []
        self.errors: List[BaseException] = []
        self._closed = False

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError(f"Task scope '{self.name}' is closed")
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.append(task)
        return task

    @property
    def active_tasks(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    async def close(self):
        """Cancel the token and every unfinished child, then wait for all of them"""
        if self._closed:
            return
        self._closed = True
        self.token.cancel()
        for task in self._tasks:
            if not task.done():
                task.cancel()
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for task, result in zip(self._tasks, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                self.errors.append(result)
                logger.warning(f"Task {task.get_name()} in scope '{self.name}' failed: {result}")

    async def __aenter__(self) -> 'TaskScope':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        if exc_type is None and self.errors:
            raise self.errors[0]
        return False
