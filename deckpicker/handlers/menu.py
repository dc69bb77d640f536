from __future__ import annotations

import math

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from deckpicker.config import ROLL_DEADLINE_MS
from deckpicker.db import get_picked_id, list_cards, set_awaiting_input
from deckpicker.deck import eligible_cards
from deckpicker.formatters import format_pick_screen
from deckpicker.keyboards import kb_pick
from deckpicker.roller import RollUpdate
from deckpicker.session import store
from deckpicker.ui import SCREEN_PICK, show_screen


router = Router()


async def render_pick_screen(bot: Bot, user_id: int, update: RollUpdate | None = None) -> None:
    """Render the Pick screen from the store, overlaid with a roll update if given."""
    cards = await list_cards(user_id)
    unchecked = len(eligible_cards(cards))
    if update is None:
        selector = store.peek(user_id)
        if selector is not None and selector.is_rolling:
            update = RollUpdate(displayed=selector.displayed, is_rolling=True)
    is_rolling = update is not None and update.is_rolling

    picked_id = await get_picked_id(user_id)
    picked = next((c for c in cards if c.id == picked_id), None)
    if update is not None and update.committed is not None and picked is None:
        # Committed card deleted mid-draw still shows as the result once
        picked = update.committed

    rolling_name = update.displayed.name if update is not None and update.displayed else None
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_pick_screen(
            unchecked=unchecked,
            picked=picked,
            rolling_name=rolling_name,
            is_rolling=is_rolling,
            deadline_seconds=math.ceil(ROLL_DEADLINE_MS / 1000),
        ),
        reply_markup=kb_pick(
            can_pick=unchecked > 0,
            is_rolling=is_rolling,
            picked_id=picked.id if picked is not None and picked_id == picked.id else None,
        ),
        screen_id=SCREEN_PICK,
    )


@router.message(Command("menu"))
async def cmd_menu(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    await set_awaiting_input(user_id, None)
    await render_pick_screen(message.bot, user_id)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:menu")
async def on_menu(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    await set_awaiting_input(user_id, None)
    await render_pick_screen(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:noop")
async def on_noop(cb: CallbackQuery) -> None:
    await cb.answer()
