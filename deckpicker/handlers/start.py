from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from ..db import ensure_user
from .menu import render_pick_screen


router = Router()


@router.message(Command("start"))
async def cmd_start(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    await ensure_user(user_id)
    await message.answer(
        "Welcome! Keep a deck of cards here and let the bot pick one at random.\n"
        "Add cards in ⚙️ Manage deck (or /add France, Japan), then press 🎲 Pick."
    )
    await render_pick_screen(message.bot, user_id)  # type: ignore[arg-type]
