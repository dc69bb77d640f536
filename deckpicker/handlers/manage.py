from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from deckpicker.db import (
    delete_card,
    get_picked_id,
    get_ui_state,
    insert_cards,
    list_cards,
    set_awaiting_input,
    set_search_query,
    toggle_done,
)
from deckpicker.deck import eligible_cards, paginate, search_cards, sort_for_listing, split_bulk
from deckpicker.formatters import format_add_result, format_input_prompt, format_manage_screen
from deckpicker.keyboards import kb_input_back, kb_manage
from deckpicker.session import store
from deckpicker.ui import SCREEN_INPUT, SCREEN_MANAGE, show_screen
from deckpicker.validators import validate_card_names, validate_search_query


router = Router()

ROLLING_NOTICE = "Wait for the roll to finish."


FIELD_META = {
    "add": (
        "Add cards",
        "Send one name, or paste a list separated by newline, comma, or semicolon. "
        "Duplicates are skipped (case-insensitive).",
        validate_card_names,
    ),
    "search": (
        "Search",
        'Send part of a card name (e.g. "ger").',
        validate_search_query,
    ),
}


async def render_manage_screen(bot: Bot, user_id: int, page: int = 1, notice: str | None = None) -> None:
    cards = await list_cards(user_id)
    state = await get_ui_state(user_id)
    query = str(state["search_query"]) if state and state["search_query"] else None
    listed = search_cards(sort_for_listing(cards), query or "")
    pg = paginate(listed, page)
    text = format_manage_screen(
        pg,
        total_cards=len(cards),
        unchecked=len(eligible_cards(cards)),
        query=query,
    )
    if notice:
        text = f"{notice}\n\n{text}"
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=text,
        reply_markup=kb_manage(pg, picked_id=await get_picked_id(user_id), has_query=bool(query)),
        screen_id=SCREEN_MANAGE,
    )


async def add_cards_from_text(user_id: int, text: str) -> str:
    names = split_bulk(text)
    added = await insert_cards(user_id, names)
    return format_add_result(len(added), len(names))


def _parse_card_callback(data: str) -> tuple[str, int]:
    # ui:manage.<action>:<card_id>:<page>
    _, _, rest = data.split(":", 2)
    card_id, _, page_s = rest.partition(":")
    return card_id, int(page_s or 1)


@router.message(Command("manage"))
async def cmd_manage(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    if store.is_rolling(user_id):
        await message.answer(ROLLING_NOTICE)
        return
    await set_awaiting_input(user_id, None)
    await render_manage_screen(message.bot, user_id)  # type: ignore[arg-type]


@router.message(Command("add"))
async def cmd_add(message: Message, command: CommandObject) -> None:
    assert message.from_user
    user_id = message.from_user.id
    if not command.args:
        await message.answer("Usage: /add <name>[, <name2>; ...]")
        return
    ok, err = validate_card_names(command.args)
    if not ok:
        await message.answer(err or "Invalid names.")
        return
    await message.answer(await add_cards_from_text(user_id, command.args))


@router.callback_query(F.data == "ui:manage")
async def on_manage_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    if store.is_rolling(user_id):
        await cb.answer(ROLLING_NOTICE)
        return
    await set_awaiting_input(user_id, None)
    await render_manage_screen(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:manage.page:"))
async def on_manage_page(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    _, _, page_s = cb.data.split(":", 2)
    await render_manage_screen(cb.message.bot, cb.from_user.id, page=int(page_s))  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:manage.toggle:"))
async def on_manage_toggle(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    if store.is_rolling(user_id):
        await cb.answer(ROLLING_NOTICE)
        return
    card_id, page = _parse_card_callback(cb.data)
    card = await toggle_done(user_id, card_id)
    await render_manage_screen(cb.message.bot, user_id, page=page)  # type: ignore[union-attr]
    if card is None:
        await cb.answer("Card not found.")
    else:
        await cb.answer("Done ✅" if card.done else "Back in the deck")


@router.callback_query(F.data.startswith("ui:manage.del:"))
async def on_manage_delete(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    if store.is_rolling(user_id):
        await cb.answer(ROLLING_NOTICE)
        return
    card_id, page = _parse_card_callback(cb.data)
    ok = await delete_card(user_id, card_id)
    await render_manage_screen(cb.message.bot, user_id, page=page)  # type: ignore[union-attr]
    await cb.answer("Deleted" if ok else "Card not found.")


@router.callback_query(F.data.in_({"ui:manage.add", "ui:manage.search"}))
async def on_open_input(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    field = cb.data.rsplit(".", 1)[1]
    title, desc, _ = FIELD_META[field]
    await set_awaiting_input(user_id, field)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_input_prompt(title, desc),
        reply_markup=kb_input_back(),
        screen_id=SCREEN_INPUT,
    )
    await cb.answer()


@router.callback_query(F.data == "ui:manage.clear")
async def on_clear_search(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    await set_search_query(user_id, None)
    await render_manage_screen(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()


@router.message()
async def on_text_input(message: Message) -> None:
    # Only capture if awaiting an Add/Search value
    assert message.from_user
    user_id = message.from_user.id
    state = await get_ui_state(user_id)
    awaiting = state["awaiting_input_field"] if state else None
    if not awaiting:
        return
    field = str(awaiting)
    meta = FIELD_META.get(field)
    if meta is None:
        await set_awaiting_input(user_id, None)
        await render_manage_screen(message.bot, user_id)  # type: ignore[arg-type]
        return
    title, desc, validator = meta
    text = message.text or ""
    ok, err = validator(text)
    if not ok:
        await show_screen(
            bot=message.bot,  # type: ignore[arg-type]
            user_id=user_id,
            text=format_input_prompt(title, desc, error=err or "Invalid value."),
            reply_markup=kb_input_back(),
            screen_id=SCREEN_INPUT,
        )
        return
    await set_awaiting_input(user_id, None)
    if field == "add":
        notice = await add_cards_from_text(user_id, text)
        await render_manage_screen(message.bot, user_id, notice=notice)  # type: ignore[arg-type]
    else:
        await set_search_query(user_id, text.strip())
        await render_manage_screen(message.bot, user_id)  # type: ignore[arg-type]
