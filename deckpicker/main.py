from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from deckpicker.config import BOT_TOKEN, LOG_LEVEL
from deckpicker.db import init_db
from deckpicker.handlers import help as help_cmd
from deckpicker.handlers import manage, menu, pick, start
from deckpicker.session import store


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def main() -> None:
    configure_logging()
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set. Please configure .env")

    await init_db()
    bot = Bot(BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    dp.include_router(start.router)
    dp.include_router(help_cmd.router)
    dp.include_router(menu.router)
    dp.include_router(pick.router)
    # Last: owns the catch-all text handler for Add/Search input
    dp.include_router(manage.router)

    logger.info("Starting deck picker bot")
    try:
        await dp.start_polling(bot)
    finally:
        await store.shutdown()
        await bot.session.close()


if __name__ == "__main__":
    with suppress(KeyboardInterrupt):
        asyncio.run(main())
