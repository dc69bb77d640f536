from __future__ import annotations

"""Timer primitive used by the rolling selector.

A running ``asyncio`` event loop satisfies :class:`Scheduler` as is
(``loop.call_later`` returns a ``TimerHandle`` with ``cancel()``), so the bot
passes ``asyncio.get_running_loop()`` and tests pass a virtual clock.
"""

import asyncio
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


def loop_scheduler() -> Scheduler:
    """Return the running event loop as a scheduler."""
    return asyncio.get_running_loop()
