from __future__ import annotations

import math

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from deckpicker.config import ROLL_DEADLINE_MS


router = Router()


HELP_TEXT = (
    "Keep a deck of cards and let the bot pick one for you.\n\n"
    "Basics:\n"
    "- /start: Initialize and open the picker.\n"
    "- /menu: Show the picker screen.\n"
    "- /pick: Roll a random card from the unchecked ones.\n"
    "- /manage: Open your deck (toggle done, delete, search, add).\n"
    "- /add France, Japan; Brazil: Add one or more cards at once.\n\n"
    "How picking works:\n"
    "- Only unchecked cards take part; each has the same chance.\n"
    "- The reel spins and slows down, then lands on the pick.\n"
    f"- A roll never takes longer than {math.ceil(ROLL_DEADLINE_MS / 1000)} seconds: "
    "at the limit it stops on whatever is shown.\n"
    "- Mark the pick done to keep it out of the next rolls.\n\n"
    "Adding cards:\n"
    "- Separate names with newline, comma, or semicolon.\n"
    "- Duplicates are skipped (case-insensitive)."
)


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)
