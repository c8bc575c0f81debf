"""
ScreenScope - Lifetime of the async work started by one screen.

Reads started through a scope are cancelled when the screen goes away, so
their results never land in discarded state. Writes are shielded and run
to completion once issued.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from learnpath.errors import ScopeClosedError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScreenScope:
    """
    Track in-flight reads for a screen.

    Use as an async context manager, or call close() when the screen is
    unmounted or navigated away from.
    """

    def __init__(self, name: str = "screen"):
        self.name = name
        self._reads: set[asyncio.Task] = set()
        self._writes: set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_reads(self) -> int:
        return sum(1 for task in self._reads if not task.done())

    async def __aenter__(self) -> "ScreenScope":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def read(self, awaitable: Awaitable[T]) -> T:
        """
        Await a read that is abandoned if the scope closes first.

        Raises:
            ScopeClosedError: If the scope is already closed
            asyncio.CancelledError: If the scope closes while the read is pending
        """
        if self._closed:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise ScopeClosedError(f"{self.name} is closed")
        task = asyncio.ensure_future(awaitable)
        self._reads.add(task)
        try:
            return await task
        finally:
            self._reads.discard(task)

    async def write(self, awaitable: Awaitable[T]) -> T:
        """Await a write that keeps running even if the scope closes."""
        task = asyncio.ensure_future(awaitable)
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)
        return await asyncio.shield(task)

    def close(self):
        """Cancel pending reads. Writes already issued are left to finish."""
        if self._closed:
            return
        self._closed = True
        cancelled = 0
        for task in list(self._reads):
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug("%s closed, cancelled %d pending reads", self.name, cancelled)

    async def drain_writes(self):
        """Wait for every write issued through this scope to finish."""
        if self._writes:
            await asyncio.gather(*self._writes, return_exceptions=True)
