from __future__ import annotations

"""Pick flow: start a rolling draw and stream it into the Pick screen."""

import asyncio
import logging

import aiosqlite
from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from deckpicker.config import ROLL_RENDER_INTERVAL
from deckpicker.db import list_cards, set_done, set_picked_id
from deckpicker.deck import eligible_cards
from deckpicker.handlers.menu import render_pick_screen
from deckpicker.roller import AlreadyRolling, RollError, RollingSelector, RollUpdate
from deckpicker.scheduler import loop_scheduler
from deckpicker.session import store


logger = logging.getLogger(__name__)

router = Router()


class RollView:
    """Coalesces selector updates into rate-limited edits of the Pick screen.

    Only the newest pending update is rendered; the terminal update is always
    rendered and its card persisted as the user's pick.
    """

    def __init__(self, bot: Bot, user_id: int, *, interval: float = ROLL_RENDER_INTERVAL) -> None:
        self._bot = bot
        self._user_id = user_id
        self._interval = interval
        self._latest: RollUpdate | None = None
        self._task: asyncio.Task[None] | None = None

    def push(self, update: RollUpdate) -> None:
        self._latest = update
        if self._task is None or self._task.done():
            self._task = store.track(asyncio.create_task(self._drain()))

    async def _drain(self) -> None:
        while self._latest is not None:
            update, self._latest = self._latest, None
            if update.committed is not None:
                try:
                    await set_picked_id(self._user_id, update.committed.id)
                except aiosqlite.Error as e:
                    logger.error("Failed to store pick for user %s: %s", self._user_id, e)
            try:
                await render_pick_screen(self._bot, self._user_id, update=update)
            except TelegramAPIError as e:
                logger.warning("Failed to render roll for user %s: %s", self._user_id, e)
            if update.terminal:
                continue
            await asyncio.sleep(self._interval)


async def start_pick(bot: Bot, user_id: int) -> str | None:
    """Start a draw for the user. Returns a notice for the user when refused."""
    selector = await store.get(
        user_id,
        lambda: RollingSelector(loop_scheduler(), on_update=RollView(bot, user_id).push),
    )
    if selector.is_rolling:
        return str(AlreadyRolling())
    eligible = eligible_cards(await list_cards(user_id))
    if eligible:
        await set_picked_id(user_id, None)
    try:
        selector.start_draw(eligible)
    except RollError as e:
        logger.debug("Pick refused for user %s: %s", user_id, e)
        return str(e)
    return None


@router.message(Command("pick"))
async def cmd_pick(message: Message) -> None:
    assert message.from_user
    notice = await start_pick(message.bot, message.from_user.id)  # type: ignore[arg-type]
    if notice:
        await message.answer(notice)


@router.callback_query(F.data == "ui:pick")
async def on_pick(cb: CallbackQuery) -> None:
    assert cb.from_user
    notice = await start_pick(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    if notice:
        await cb.answer(notice, show_alert=True)
        return
    await cb.answer()


@router.callback_query(F.data.startswith("ui:pick.done:"))
async def on_mark_done(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    if store.is_rolling(user_id):
        await cb.answer("Wait for the roll to finish.")
        return
    _, _, card_id = cb.data.split(":", 2)
    ok = await set_done(user_id, card_id, True)
    await render_pick_screen(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer("Marked done ✅" if ok else "Card not found.")
