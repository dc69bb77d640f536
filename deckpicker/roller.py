from __future__ import annotations

"""Rolling selector: a slot-machine style draw over a snapshot of eligible cards.

Each draw runs two timelines on the same scheduler:

- animation: ticks showing random cards with an ease-out delay, landing on a
  winner chosen up front, then a short settle before the draw ends;
- deadline: a single timer that ends the draw on whatever card is displayed.

Whichever ends the draw first cancels the other. Every timer callback checks
the session's liveness flag and generation before touching state, so a late
callback is a no-op.
"""

import functools
import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from deckpicker.config import (
    ROLL_BASE_DELAY_MS,
    ROLL_DEADLINE_MS,
    ROLL_GROWTH_FACTOR,
    ROLL_GROWTH_STEP_MS,
    ROLL_MAX_STEPS,
    ROLL_MIN_STEPS,
    ROLL_SETTLE_MS,
    ROLL_STEPS_PER_CARD,
)
from deckpicker.models import Card, Outcome
from deckpicker.scheduler import Scheduler, TimerHandle


logger = logging.getLogger(__name__)


class RollError(Exception):
    """Base class for refused draws."""


class NoEligibleItems(RollError):
    def __init__(self) -> None:
        super().__init__("No unchecked cards left. Add more in Manage Deck.")


class AlreadyRolling(RollError):
    def __init__(self) -> None:
        super().__init__("A draw is already rolling.")


@dataclass(frozen=True)
class RollTimings:
    base_delay_ms: int = ROLL_BASE_DELAY_MS
    growth_factor: float = ROLL_GROWTH_FACTOR
    growth_step_ms: int = ROLL_GROWTH_STEP_MS
    steps_per_card: int = ROLL_STEPS_PER_CARD
    min_steps: int = ROLL_MIN_STEPS
    max_steps: int = ROLL_MAX_STEPS
    deadline_ms: int = ROLL_DEADLINE_MS
    settle_ms: int = ROLL_SETTLE_MS


def spin_steps(n: int, timings: RollTimings) -> int:
    """Number of ticks for a deck of ``n`` eligible cards."""
    return min(timings.max_steps, max(timings.min_steps, n * timings.steps_per_card))


def next_delay(delay: int, timings: RollTimings) -> int:
    """Ease-out recurrence; strictly increasing for a positive step."""
    return math.floor(delay * timings.growth_factor + timings.growth_step_ms)


@dataclass(frozen=True)
class RollUpdate:
    """What the presentation layer sees after every state change."""

    displayed: Optional[Card]
    is_rolling: bool
    committed: Optional[Card] = None
    outcome: Optional[Outcome] = None

    @property
    def terminal(self) -> bool:
        return not self.is_rolling


class RollSession:
    """One draw. Owns its animation and deadline timers."""

    def __init__(
        self,
        eligible: Sequence[Card],
        scheduler: Scheduler,
        *,
        timings: RollTimings,
        rng: random.Random,
        emit: Callable[[RollUpdate], None],
    ) -> None:
        self.eligible: tuple[Card, ...] = tuple(eligible)
        self.timings = timings
        self.steps = spin_steps(len(self.eligible), timings)
        self.winner: Card = self._random_card(rng)
        self.displayed: Optional[Card] = None
        self.committed: Optional[Card] = None
        self.outcome: Optional[Outcome] = None
        self.live = False
        self.ticks = 0

        self._scheduler = scheduler
        self._rng = rng
        self._emit = emit
        self._delay = timings.base_delay_ms
        self._now_ms = 0
        self._generation = 0
        self._pending: Optional[Callable[[], None]] = None
        self._pending_at_ms: Optional[int] = None
        self._step_handle: Optional[TimerHandle] = None
        self._deadline_handle: Optional[TimerHandle] = None

    @property
    def elapsed_ms(self) -> int:
        """Nominal time since start of the step currently being processed."""
        return self._now_ms

    def start(self) -> None:
        self.live = True
        self._deadline_handle = self._scheduler.call_later(
            self.timings.deadline_ms / 1000, self._on_deadline
        )
        self._tick()

    def cancel(self) -> bool:
        """Stop without committing. Returns False if already terminated."""
        if not self.live:
            return False
        self.live = False
        self._cancel_timers()
        logger.debug("Roll cancelled after %d ticks", self.ticks)
        return True

    def _random_card(self, rng: random.Random) -> Card:
        return self.eligible[rng.randrange(len(self.eligible))]

    def _schedule(self, delay_ms: int, step: Callable[[], None]) -> None:
        self._generation += 1
        self._pending = step
        self._pending_at_ms = self._now_ms + delay_ms
        self._step_handle = self._scheduler.call_later(
            delay_ms / 1000, functools.partial(self._fire, self._generation)
        )

    def _fire(self, generation: int) -> None:
        if not self.live or generation != self._generation or self._pending is None:
            logger.debug("Ignoring stale roll timer (generation %d)", generation)
            return
        step = self._pending
        if self._pending_at_ms is not None:
            self._now_ms = self._pending_at_ms
        self._pending = None
        self._pending_at_ms = None
        self._step_handle = None
        step()

    def _tick(self) -> None:
        self.ticks += 1
        if self.ticks < self.steps:
            self._show(self._random_card(self._rng))
            self._delay = next_delay(self._delay, self.timings)
            self._schedule(self._delay, self._tick)
        else:
            # Land on the winner, then let it settle on screen
            self._show(self.winner)
            self._schedule(self.timings.settle_ms, self._settle)

    def _settle(self) -> None:
        self._finish(self.winner, "finished")

    def _on_deadline(self) -> None:
        if not self.live:
            return
        self._deadline_handle = None
        # Ties go to the animation: a step due by the deadline runs first.
        while (
            self.live
            and self._pending_at_ms is not None
            and self._pending_at_ms <= self.timings.deadline_ms
        ):
            if self._step_handle is not None:
                self._step_handle.cancel()
            self._fire(self._generation)
        if not self.live:
            return
        self._now_ms = self.timings.deadline_ms
        self._finish(self.displayed or self.winner, "deadline")

    def _show(self, card: Card) -> None:
        self.displayed = card
        self._emit(RollUpdate(displayed=card, is_rolling=True))

    def _finish(self, card: Card, outcome: Outcome) -> None:
        if not self.live:
            return
        self.live = False
        self._cancel_timers()
        self.displayed = card
        self.committed = card
        self.outcome = outcome
        logger.info(
            "Roll %s on %r after %d/%d ticks (%d ms)",
            outcome,
            card.name,
            self.ticks,
            self.steps,
            self._now_ms,
        )
        self._emit(RollUpdate(displayed=card, is_rolling=False, committed=card, outcome=outcome))

    def _cancel_timers(self) -> None:
        self._generation += 1
        self._pending = None
        self._pending_at_ms = None
        for handle in (self._step_handle, self._deadline_handle):
            if handle is not None:
                handle.cancel()
        self._step_handle = None
        self._deadline_handle = None


class RollingSelector:
    """Runs at most one :class:`RollSession` at a time and keeps the last pick."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        on_update: Callable[[RollUpdate], None] | None = None,
        timings: RollTimings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_update = on_update
        self._timings = timings or RollTimings()
        self._rng = rng or random.Random()
        self._session: Optional[RollSession] = None
        self._committed: Optional[Card] = None

    @property
    def session(self) -> Optional[RollSession]:
        return self._session

    @property
    def is_rolling(self) -> bool:
        return self._session is not None and self._session.live

    @property
    def displayed(self) -> Optional[Card]:
        return self._session.displayed if self._session else None

    @property
    def committed(self) -> Optional[Card]:
        return self._committed

    def start_draw(self, eligible: Sequence[Card]) -> None:
        """Start a draw over a snapshot of ``eligible``.

        Raises AlreadyRolling while a draw is live and NoEligibleItems for an
        empty snapshot; neither changes any state.
        """
        if self.is_rolling:
            logger.debug("Refusing draw: already rolling")
            raise AlreadyRolling()
        snapshot = tuple(eligible)
        if not snapshot:
            raise NoEligibleItems()
        self._committed = None
        session = RollSession(
            snapshot,
            self._scheduler,
            timings=self._timings,
            rng=self._rng,
            emit=self._emit,
        )
        self._session = session
        logger.info("Roll started over %d cards, %d ticks", len(snapshot), session.steps)
        session.start()

    def cancel(self) -> bool:
        """Tear down a live draw without committing anything."""
        if self._session is None:
            return False
        return self._session.cancel()

    def _emit(self, update: RollUpdate) -> None:
        if update.committed is not None:
            self._committed = update.committed
        if self._on_update is not None:
            self._on_update(update)
