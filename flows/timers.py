import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SessionTimer:
    """Cancellable asyncio timer owned by a single flow session.

    Scheduling a new callback replaces the pending one, so a session that is
    thrown away can never be touched by a timer it created.
    """

    def __init__(self, name: str):
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def once(self, delay: float, callback: Callable[[], None]) -> None:
        self._start(self._run_once(delay, callback))

    def every(self, interval: float, callback: Callable[[], bool]) -> None:
        """Call ``callback`` every ``interval`` seconds until it returns False."""
        self._start(self._run_every(interval, callback))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _start(self, coro) -> None:
        self.cancel()
        task = asyncio.get_running_loop().create_task(coro, name=self.name)
        task.add_done_callback(self._report)
        self._task = task

    async def _run_once(self, delay: float, callback: Callable[[], None]) -> None:
        await asyncio.sleep(delay)
        callback()

    async def _run_every(self, interval: float, callback: Callable[[], bool]) -> None:
        while True:
            await asyncio.sleep(interval)
            if not callback():
                return

    def _report(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Timer %s failed: %s", self.name, exc, exc_info=exc)
