from __future__ import annotations

import heapq
from pathlib import Path
from typing import Any, Callable

import pytest
import pytest_asyncio


class FakeHandle:
    def __init__(self, when_ms: int, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when_ms = when_ms
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.ran = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Virtual millisecond clock with loop.call_later semantics.

    Timers due at the same instant run in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = 0
        self._heap: list[tuple[int, int, FakeHandle]] = []
        self.handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now_ms + round(delay * 1000), callback, args)
        heapq.heappush(self._heap, (handle.when_ms, self._seq, handle))
        self._seq += 1
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for _, _, h in self._heap if not h.cancelled]

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self.now_ms = when
            handle.ran = True
            handle.callback(*handle.args)
        self.now_ms = target

    def run_all(self) -> None:
        while self.pending:
            self.advance(min(h.when_ms for h in self.pending) - self.now_ms)

    def fire_cancelled(self) -> int:
        """Run every cancelled, never-run callback, as a lost cancellation race would."""
        fired = 0
        for handle in list(self.handles):
            if handle.cancelled and not handle.ran:
                handle.ran = True
                handle.callback(*handle.args)
                fired += 1
        return fired


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest_asyncio.fixture
async def db_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    import deckpicker.db as dbmod

    path = tmp_path / "test.db"
    monkeypatch.setattr(dbmod, "DB_PATH", path, raising=False)
    await dbmod.init_db()
    return path
