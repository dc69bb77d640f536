from __future__ import annotations

import contextlib
import logging
import time
import uuid
from typing import AsyncIterator, Iterable

import aiosqlite

from deckpicker.config import DB_PATH
from deckpicker.deck import filter_new_names
from deckpicker.models import Card

logger = logging.getLogger(__name__)

_SENTINEL = object()


@contextlib.asynccontextmanager
async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    db = await aiosqlite.connect(DB_PATH.as_posix())
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


async def init_db() -> None:
    async with get_db() as db:
        await db.executescript(
            """
            PRAGMA journal_mode=WAL;

            CREATE TABLE IF NOT EXISTS cards (
                id TEXT PRIMARY KEY,
                user_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                done INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_cards_user_created ON cards(user_id, created_at);
            CREATE UNIQUE INDEX IF NOT EXISTS ux_cards_user_name ON cards(user_id, name COLLATE NOCASE);

            -- Last committed pick per user
            CREATE TABLE IF NOT EXISTS user_state (
                user_id INTEGER PRIMARY KEY,
                picked_card_id TEXT
            );

            -- UI state for inline navigation and message cleanup
            CREATE TABLE IF NOT EXISTS user_ui_state (
                user_id INTEGER PRIMARY KEY,
                last_ui_message_id INTEGER,
                current_screen TEXT,
                awaiting_input_field TEXT,
                search_query TEXT
            );
            """
        )
        await db.commit()


def new_card_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def _row_to_card(row: aiosqlite.Row) -> Card:
    return Card(
        id=str(row["id"]),
        name=str(row["name"]),
        done=bool(row["done"]),
        created_at=int(row["created_at"]),
    )


async def ensure_user(user_id: int) -> None:
    async with get_db() as db:
        await db.execute("INSERT OR IGNORE INTO user_state(user_id) VALUES (?)", (user_id,))
        await db.commit()


async def list_cards(user_id: int) -> list[Card]:
    async with get_db() as db:
        cur = await db.execute(
            "SELECT id, name, done, created_at FROM cards WHERE user_id=? ORDER BY created_at, rowid",
            (user_id,),
        )
        rows = await cur.fetchall()
    return [_row_to_card(r) for r in rows]


async def get_card(user_id: int, card_id: str) -> Card | None:
    async with get_db() as db:
        cur = await db.execute(
            "SELECT id, name, done, created_at FROM cards WHERE user_id=? AND id=?",
            (user_id, card_id),
        )
        row = await cur.fetchone()
    return _row_to_card(row) if row else None


async def insert_cards(user_id: int, names: Iterable[str]) -> list[Card]:
    """Insert new cards, skipping blanks and case-insensitive duplicates.

    Bulk inserts share one timestamp base with +index offsets so the list
    keeps the order the names were given in. Returns the inserted cards.
    """
    existing = [c.name for c in await list_cards(user_id)]
    fresh = filter_new_names(existing, names)
    if not fresh:
        return []
    base = now_ms()
    cards = [
        Card(id=new_card_id(), name=name, done=False, created_at=base + idx)
        for idx, name in enumerate(fresh)
    ]
    inserted: list[Card] = []
    async with get_db() as db:
        for c in cards:
            cur = await db.execute(
                "INSERT OR IGNORE INTO cards(id, user_id, name, done, created_at) VALUES (?, ?, ?, 0, ?)",
                (c.id, user_id, c.name, c.created_at),
            )
            # NOCASE index can still reject non-ASCII case variants
            if cur.rowcount:
                inserted.append(c)
        await db.commit()
    logger.info("User %s added %d card(s)", user_id, len(inserted))
    return inserted


async def set_done(user_id: int, card_id: str, done: bool) -> bool:
    async with get_db() as db:
        cur = await db.execute(
            "UPDATE cards SET done=? WHERE user_id=? AND id=?",
            (1 if done else 0, user_id, card_id),
        )
        await db.execute(
            "UPDATE user_state SET picked_card_id=NULL WHERE user_id=? AND picked_card_id=?",
            (user_id, card_id),
        )
        await db.commit()
        return cur.rowcount > 0


async def toggle_done(user_id: int, card_id: str) -> Card | None:
    """Flip the done flag; returns the updated card or None if it is gone."""
    card = await get_card(user_id, card_id)
    if card is None:
        return None
    await set_done(user_id, card_id, not card.done)
    return Card(id=card.id, name=card.name, done=not card.done, created_at=card.created_at)


async def delete_card(user_id: int, card_id: str) -> bool:
    async with get_db() as db:
        cur = await db.execute("DELETE FROM cards WHERE user_id=? AND id=?", (user_id, card_id))
        await db.execute(
            "UPDATE user_state SET picked_card_id=NULL WHERE user_id=? AND picked_card_id=?",
            (user_id, card_id),
        )
        await db.commit()
        return cur.rowcount > 0


async def get_picked_id(user_id: int) -> str | None:
    async with get_db() as db:
        cur = await db.execute("SELECT picked_card_id FROM user_state WHERE user_id=?", (user_id,))
        row = await cur.fetchone()
    return str(row[0]) if row and row[0] is not None else None


async def set_picked_id(user_id: int, card_id: str | None) -> None:
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_state(user_id, picked_card_id) VALUES(?, ?) "
            "ON CONFLICT(user_id) DO UPDATE SET picked_card_id=excluded.picked_card_id",
            (user_id, card_id),
        )
        await db.commit()


async def get_ui_state(user_id: int) -> aiosqlite.Row | None:
    """Return UI state row for a user if exists."""
    async with get_db() as db:
        cur = await db.execute(
            "SELECT user_id, last_ui_message_id, current_screen, awaiting_input_field, search_query FROM user_ui_state WHERE user_id=?",
            (user_id,),
        )
        return await cur.fetchone()


async def set_ui_state(
    user_id: int,
    last_ui_message_id: int | None = None,
    current_screen: str | None = None,
    awaiting_input_field: str | None | object = _SENTINEL,
    search_query: str | None | object = _SENTINEL,
) -> None:
    """Upsert UI state fields for the user.

    ``None`` keeps the stored message id / screen; the sentinel default keeps
    the stored awaiting field / search query while an explicit ``None``
    clears them.
    """
    row = await get_ui_state(user_id)
    new_msg_id = last_ui_message_id if last_ui_message_id is not None else (
        int(row["last_ui_message_id"]) if row and row["last_ui_message_id"] is not None else None
    )
    new_screen = current_screen if current_screen is not None else (
        str(row["current_screen"]) if row and row["current_screen"] is not None else None
    )
    if awaiting_input_field is _SENTINEL:
        new_awaiting = row["awaiting_input_field"] if row else None
    else:
        new_awaiting = awaiting_input_field
    if search_query is _SENTINEL:
        new_query = row["search_query"] if row else None
    else:
        new_query = search_query
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_ui_state(user_id, last_ui_message_id, current_screen, awaiting_input_field, search_query) VALUES(?,?,?,?,?) "
            "ON CONFLICT(user_id) DO UPDATE SET last_ui_message_id=excluded.last_ui_message_id, current_screen=excluded.current_screen, "
            "awaiting_input_field=excluded.awaiting_input_field, search_query=excluded.search_query",
            (user_id, new_msg_id, new_screen, new_awaiting, new_query),
        )
        await db.commit()


async def set_awaiting_input(user_id: int, field: str | None) -> None:
    """Set or clear the awaiting input field in UI state."""
    await set_ui_state(user_id, awaiting_input_field=field)


async def set_search_query(user_id: int, query: str | None) -> None:
    await set_ui_state(user_id, search_query=query or None)
