from __future__ import annotations

import asyncio
import logging
import random

import aiosqlite
import pytest
import pytest_asyncio

import deckpicker.handlers.pick as pick_mod
from deckpicker.db import get_picked_id, insert_cards, set_picked_id
from deckpicker.models import Card
from deckpicker.roller import AlreadyRolling, NoEligibleItems, RollingSelector, RollTimings, RollUpdate
from deckpicker.session import SelectorStore


FAST = RollTimings(
    base_delay_ms=1,
    growth_factor=1.0,
    growth_step_ms=1,
    min_steps=4,
    max_steps=4,
    deadline_ms=2000,
    settle_ms=5,
)


def make_cards(n: int) -> list[Card]:
    return [Card(id=f"id{i}", name=f"Card {i}", done=False, created_at=i) for i in range(n)]


@pytest.mark.asyncio
async def test_selector_store_creates_once_and_shuts_down(scheduler):
    store = SelectorStore()
    created = []

    def factory() -> RollingSelector:
        s = RollingSelector(scheduler, timings=FAST, rng=random.Random(1))
        created.append(s)
        return s

    s1 = await store.get(1, factory)
    s2 = await store.get(1, factory)
    assert s1 is s2 and len(created) == 1
    assert store.peek(2) is None
    assert not store.is_rolling(1)

    s1.start_draw(make_cards(3))
    assert store.is_rolling(1)
    await store.shutdown()
    assert not s1.is_rolling
    assert store.peek(1) is None
    assert scheduler.pending == []


@pytest.mark.asyncio
async def test_roll_view_renders_latest_and_persists_commit(monkeypatch):
    rendered: list[RollUpdate | None] = []
    persisted: list[tuple[int, str | None]] = []

    async def fake_render(bot, user_id, update=None):
        rendered.append(update)
        await asyncio.sleep(0)

    async def fake_set_picked(user_id, card_id):
        persisted.append((user_id, card_id))

    monkeypatch.setattr(pick_mod, "render_pick_screen", fake_render)
    monkeypatch.setattr(pick_mod, "set_picked_id", fake_set_picked)

    view = pick_mod.RollView(bot=object(), user_id=5, interval=0.05)  # type: ignore[arg-type]
    cards = make_cards(3)
    done = asyncio.Event()

    def on_update(u: RollUpdate) -> None:
        view.push(u)
        if u.terminal:
            done.set()

    selector = RollingSelector(
        pick_mod.loop_scheduler(), on_update=on_update, timings=FAST, rng=random.Random(3)
    )
    selector.start_draw(cards)
    await asyncio.wait_for(done.wait(), timeout=2)
    # Let the drain task catch up with the terminal update
    for _ in range(50):
        if rendered and rendered[-1] is not None and rendered[-1].terminal:
            break
        await asyncio.sleep(0.02)

    assert rendered[-1] is not None and rendered[-1].terminal
    assert rendered[-1].committed == selector.committed
    assert persisted == [(5, selector.committed.id)]
    # Updates were coalesced: fewer renders than ticks + terminal
    assert len(rendered) < 5


@pytest_asyncio.fixture
async def pick_store(monkeypatch):
    """Fresh selector store for the pick handlers, with rendering stubbed out."""
    fresh = SelectorStore()
    rendered: list[RollUpdate | None] = []

    async def fake_render(bot, user_id, update=None):
        rendered.append(update)

    monkeypatch.setattr(pick_mod, "store", fresh)
    monkeypatch.setattr(pick_mod, "render_pick_screen", fake_render)
    fresh.rendered = rendered  # type: ignore[attr-defined]
    yield fresh
    await fresh.shutdown()


@pytest.mark.asyncio
async def test_start_pick_on_empty_deck_reports_notice(db_file, pick_store):
    notice = await pick_mod.start_pick(object(), 42)  # type: ignore[arg-type]
    assert notice == str(NoEligibleItems())
    assert notice == "No unchecked cards left. Add more in Manage Deck."
    assert not pick_store.is_rolling(42)


@pytest.mark.asyncio
async def test_start_pick_while_rolling_is_refused(db_file, pick_store):
    await insert_cards(42, ["France", "Japan", "Peru"])
    assert await pick_mod.start_pick(object(), 42) is None  # type: ignore[arg-type]
    assert pick_store.is_rolling(42)
    selector = pick_store.peek(42)

    notice = await pick_mod.start_pick(object(), 42)  # type: ignore[arg-type]
    assert notice == str(AlreadyRolling())
    assert pick_store.peek(42) is selector
    assert selector.is_rolling


@pytest.mark.asyncio
async def test_start_pick_clears_previous_pick(db_file, pick_store):
    cards = await insert_cards(42, ["France", "Japan"])
    await set_picked_id(42, cards[0].id)
    assert await pick_mod.start_pick(object(), 42) is None  # type: ignore[arg-type]
    assert await get_picked_id(42) is None


@pytest.mark.asyncio
async def test_roll_view_survives_store_error(monkeypatch, pick_store, caplog):
    async def failing_set_picked(user_id, card_id):
        raise aiosqlite.OperationalError("database is locked")

    monkeypatch.setattr(pick_mod, "set_picked_id", failing_set_picked)
    card = make_cards(1)[0]
    final = RollUpdate(displayed=card, is_rolling=False, committed=card, outcome="finished")

    view = pick_mod.RollView(bot=object(), user_id=5, interval=0.01)  # type: ignore[arg-type]
    with caplog.at_level(logging.ERROR, logger="deckpicker.handlers.pick"):
        view.push(final)
        task = view._task
        await task
    assert task.exception() is None
    assert pick_store.rendered == [final]
    assert "Failed to store pick for user 5" in caplog.text


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_render(pick_store):
    card = make_cards(1)[0]
    view = pick_mod.RollView(bot=object(), user_id=5, interval=30)  # type: ignore[arg-type]
    view.push(RollUpdate(displayed=card, is_rolling=True))
    task = view._task
    # Let the drain render once and park in its sleep
    for _ in range(5):
        await asyncio.sleep(0)
    assert pick_store.rendered and not task.done()

    await pick_store.shutdown()
    assert task.cancelled()
