from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from deckpicker.models import Card, Page


def kb_pick(*, can_pick: bool, is_rolling: bool, picked_id: str | None = None) -> InlineKeyboardMarkup:
    """Pick screen keyboard. While rolling only the (inert) rolling button remains."""
    if is_rolling:
        return InlineKeyboardMarkup(
            inline_keyboard=[[InlineKeyboardButton(text="🎰 Rolling…", callback_data="ui:pick")]]
        )
    rows = []
    if can_pick:
        rows.append([InlineKeyboardButton(text="🎲 Pick a card", callback_data="ui:pick")])
    if picked_id:
        rows.append([InlineKeyboardButton(text="✅ Mark done", callback_data=f"ui:pick.done:{picked_id}")])
    rows.append([InlineKeyboardButton(text="⚙️ Manage deck", callback_data="ui:manage")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def _card_label(card: Card, picked_id: str | None) -> str:
    mark = "✅" if card.done else "☑️"
    star = " ⭐" if card.id == picked_id else ""
    return f"{mark} {card.name}{star}"


def kb_manage(page: Page, *, picked_id: str | None, has_query: bool) -> InlineKeyboardMarkup:
    rows = [
        [
            InlineKeyboardButton(
                text=_card_label(c, picked_id),
                callback_data=f"ui:manage.toggle:{c.id}:{page.page}",
            ),
            InlineKeyboardButton(text="🗑", callback_data=f"ui:manage.del:{c.id}:{page.page}"),
        ]
        for c in page.items
    ]
    if page.total_pages > 1:
        pager = []
        if page.page > 1:
            pager.append(InlineKeyboardButton(text="← Prev", callback_data=f"ui:manage.page:{page.page - 1}"))
        pager.append(
            InlineKeyboardButton(text=f"{page.page}/{page.total_pages}", callback_data="ui:noop")
        )
        if page.page < page.total_pages:
            pager.append(InlineKeyboardButton(text="Next →", callback_data=f"ui:manage.page:{page.page + 1}"))
        rows.append(pager)
    search_btn = (
        InlineKeyboardButton(text="✖️ Clear search", callback_data="ui:manage.clear")
        if has_query
        else InlineKeyboardButton(text="🔍 Search", callback_data="ui:manage.search")
    )
    rows.append([InlineKeyboardButton(text="➕ Add cards", callback_data="ui:manage.add"), search_btn])
    rows.append([InlineKeyboardButton(text="◀️ Back to picker", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_input_back() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data="ui:manage")]]
    )
