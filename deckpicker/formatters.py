from __future__ import annotations

import html

from deckpicker.models import Card, Page


def escape_html(s: str) -> str:
    """Escape text for safe HTML rendering in Telegram."""
    return html.escape(s, quote=True)


def format_pick_screen(
    *,
    unchecked: int,
    picked: Card | None,
    rolling_name: str | None,
    is_rolling: bool,
    deadline_seconds: int = 5,
) -> str:
    """Compose the Pick screen.

    - Label "Rolling" while a draw runs, "Selected" otherwise.
    - Value: the rolling card ("…" before the first tick), the picked card,
      or "—" when nothing is picked.
    - Hint line and the count of unchecked cards.
    """
    if is_rolling:
        label = "🎰 Rolling"
        value = rolling_name or "…"
        hint = f"Good luck… (max {deadline_seconds} seconds)"
    else:
        label = "Selected"
        value = picked.name if picked else "—"
        hint = (
            "Tip: mark it done to avoid repeats."
            if picked
            else "Press Pick to choose from unchecked cards."
        )
    return "\n".join(
        [
            f"<b>{label}</b>",
            "",
            f"<b>{escape_html(value)}</b>",
            f"<i>{hint}</i>",
            "",
            f"{unchecked} unchecked remaining",
        ]
    )


def format_manage_screen(page: Page, *, total_cards: int, unchecked: int, query: str | None) -> str:
    lines = [
        "<b>Deck</b>",
        f"{total_cards} cards • {unchecked} unchecked",
    ]
    if query:
        lines.append(f"Search: <code>{escape_html(query)}</code> — {page.total} match(es)")
    else:
        lines.append(f"Showing {page.total} total")
    shown_from = 0 if page.total == 0 else page.start + 1
    lines.append(f"Page {page.page} / {page.total_pages} (showing {shown_from}-{page.end})")
    if page.total == 0:
        lines.append("")
        lines.append(
            "No results. Try a different search term."
            if query
            else "Your deck is empty. Tap ➕ Add cards to get started."
        )
    return "\n".join(lines)


def format_add_result(added: int, requested: int) -> str:
    if requested == 0:
        return "Nothing to add."
    if added == 0:
        return "Nothing new to add (all duplicates)."
    skipped = requested - added
    text = f"Added {added} card(s)."
    if skipped:
        text += f" Skipped {skipped} duplicate(s)."
    return text


def format_input_prompt(title: str, desc: str, error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.append(f"<b>{title}</b>")
    lines.append(f"<i>{desc}</i>")
    lines.append("")
    lines.append("Please send a message:")
    return "\n".join(lines)
