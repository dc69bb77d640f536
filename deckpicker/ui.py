from __future__ import annotations

"""Pick, Manage and input screens share one bot message per chat, edited in place."""

import logging
from contextlib import suppress

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup

from deckpicker.db import get_ui_state, set_ui_state

logger = logging.getLogger(__name__)


SCREEN_PICK = "pick"
SCREEN_MANAGE = "manage"
SCREEN_INPUT = "input"


async def show_screen(
    bot: Bot,
    user_id: int,
    text: str,
    reply_markup: InlineKeyboardMarkup | None,
    screen_id: str,
) -> None:
    """Edit the chat's UI message, or send a new one when there is none or it is gone.

    Telegram reports an edit with identical content as "message is not
    modified"; the message is already showing the screen, so that is kept.
    """
    state = await get_ui_state(user_id)
    chat_id = user_id
    message_id = int(state["last_ui_message_id"]) if state and state["last_ui_message_id"] else None

    if message_id is not None:
        try:
            await bot.edit_message_text(
                chat_id=chat_id,
                message_id=message_id,
                text=text,
                reply_markup=reply_markup,
            )
        except TelegramBadRequest as e:
            if "message is not modified" not in str(e).lower():
                logger.debug("Edit of message %s failed (%s); re-sending", message_id, e)
                with suppress(TelegramAPIError):
                    await bot.delete_message(chat_id, message_id)
                message_id = None

    if message_id is None:
        sent = await bot.send_message(chat_id, text, reply_markup=reply_markup)
        message_id = sent.message_id
    await set_ui_state(user_id, last_ui_message_id=message_id, current_screen=screen_id)
