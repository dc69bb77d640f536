from __future__ import annotations

from deckpicker.deck import paginate
from deckpicker.formatters import (
    format_add_result,
    format_input_prompt,
    format_manage_screen,
    format_pick_screen,
)
from deckpicker.keyboards import kb_manage, kb_pick
from deckpicker.models import Card


def card(i: int, name: str, done: bool = False) -> Card:
    return Card(id=f"c{i}", name=name, done=done, created_at=i)


def texts(kb) -> list[str]:
    return [btn.text for row in kb.inline_keyboard for btn in row]


def callbacks(kb) -> list[str]:
    return [btn.callback_data for row in kb.inline_keyboard for btn in row]


def test_pick_screen_states():
    rolling = format_pick_screen(unchecked=3, picked=None, rolling_name=None, is_rolling=True)
    assert "Rolling" in rolling and "<b>…</b>" in rolling
    assert "max 5 seconds" in rolling
    assert "3 unchecked remaining" in rolling

    spinning = format_pick_screen(unchecked=3, picked=None, rolling_name="R&D", is_rolling=True)
    assert "<b>R&amp;D</b>" in spinning

    idle = format_pick_screen(unchecked=0, picked=None, rolling_name=None, is_rolling=False)
    assert "Selected" in idle and "<b>—</b>" in idle
    assert "Press Pick" in idle

    picked = format_pick_screen(unchecked=2, picked=card(1, "Japan"), rolling_name=None, is_rolling=False)
    assert "<b>Japan</b>" in picked and "mark it done" in picked


def test_manage_screen_text():
    cards = [card(i, f"N{i}") for i in range(30)]
    text = format_manage_screen(paginate(cards, 2), total_cards=30, unchecked=30, query=None)
    assert "30 cards" in text
    assert "Page 2 / 2 (showing 26-30)" in text

    empty = format_manage_screen(paginate([], 1), total_cards=4, unchecked=1, query="zz<")
    assert "0 match(es)" in empty and "zz&lt;" in empty
    assert "No results" in empty
    assert "showing 0-0" in empty


def test_add_result_messages():
    assert format_add_result(0, 0) == "Nothing to add."
    assert format_add_result(0, 3) == "Nothing new to add (all duplicates)."
    assert format_add_result(3, 3) == "Added 3 card(s)."
    assert format_add_result(2, 3) == "Added 2 card(s). Skipped 1 duplicate(s)."


def test_input_prompt_with_error():
    txt = format_input_prompt("Search", "Send part of a name", error="Empty <search>")
    assert txt.startswith("❌ Empty &lt;search&gt;")
    assert "<b>Search</b>" in txt


def test_pick_keyboard():
    kb = kb_pick(can_pick=True, is_rolling=False, picked_id="abc")
    assert callbacks(kb) == ["ui:pick", "ui:pick.done:abc", "ui:manage"]

    kb = kb_pick(can_pick=False, is_rolling=False)
    assert callbacks(kb) == ["ui:manage"]

    kb = kb_pick(can_pick=True, is_rolling=True, picked_id="abc")
    assert texts(kb) == ["🎰 Rolling…"]


def test_manage_keyboard_rows_and_pager():
    cards = [card(i, f"N{i}", done=(i == 1)) for i in range(30)]
    pg = paginate(cards, 1)
    kb = kb_manage(pg, picked_id="c0", has_query=False)
    labels = texts(kb)
    assert labels[0] == "☑️ N0 ⭐"
    assert labels[2] == "✅ N1"
    data = callbacks(kb)
    assert "ui:manage.toggle:c0:1" in data and "ui:manage.del:c0:1" in data
    assert "ui:manage.page:2" in data and not any(d.startswith("ui:manage.page:0") for d in data)
    assert "ui:manage.search" in data and "ui:manage.add" in data
    assert data[-1] == "ui:menu"
    assert all(len(d.encode()) <= 64 for d in data)

    kb = kb_manage(paginate(cards[:3], 1), picked_id=None, has_query=True)
    data = callbacks(kb)
    assert "ui:manage.clear" in data
    assert not any(d.startswith("ui:manage.page:") for d in data)
