from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Set

from deckpicker.roller import RollingSelector

logger = logging.getLogger(__name__)


class SelectorStore:
    """One rolling selector per user, created on first use.

    Also holds the render tasks spawned for live draws so they can be
    cancelled together with the selectors.
    """

    def __init__(self) -> None:
        self._data: Dict[int, RollingSelector] = {}
        self._tasks: Set[asyncio.Task[Any]] = set()
        self._lock = asyncio.Lock()

    async def get(self, user_id: int, factory: Callable[[], RollingSelector]) -> RollingSelector:
        async with self._lock:
            selector = self._data.get(user_id)
            if selector is None:
                selector = self._data[user_id] = factory()
            return selector

    def peek(self, user_id: int) -> Optional[RollingSelector]:
        return self._data.get(user_id)

    def is_rolling(self, user_id: int) -> bool:
        selector = self._data.get(user_id)
        return selector is not None and selector.is_rolling

    def track(self, task: asyncio.Task[Any]) -> asyncio.Task[Any]:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def clear(self, user_id: int) -> None:
        async with self._lock:
            selector = self._data.pop(user_id, None)
        if selector is not None:
            selector.cancel()

    async def shutdown(self) -> None:
        """Cancel every live draw and pending render so nothing runs against torn-down state."""
        async with self._lock:
            selectors = list(self._data.values())
            self._data.clear()
        cancelled = sum(1 for s in selectors if s.cancel())
        if cancelled:
            logger.info("Cancelled %d rolling draw(s) on shutdown", cancelled)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug("Cancelled %d pending render task(s)", len(tasks))


store = SelectorStore()
