"""
Per-key single-flight: the first caller for a key starts the loader, concurrent
callers for the same key await that result instead of loading again.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Hashable

from storefront.shared.utils import get_logger

logger = get_logger(__name__)


class SingleFlight:
    def __init__(self):
        self._calls: Dict[Hashable, asyncio.Task] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._calls

    def _forget(self, key: Hashable, task: asyncio.Task) -> None:
        if self._calls.get(key) is task:
            del self._calls[key]
        if not task.cancelled():
            # Mark retrieved so a load nobody awaited does not log a warning
            task.exception()

    async def do(self, key: Hashable, fn: Callable[[], Awaitable[Any]]) -> Any:
        task = self._calls.get(key)
        if task is None:
            # The load runs detached; cancelling any caller only stops its wait
            task = asyncio.ensure_future(fn())
            self._calls[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug(f"Joining in-flight load for {key!r}")
        return await asyncio.shield(task)
