from __future__ import annotations

"""Input validators for the Manage screen text prompts."""

from typing import Tuple

from deckpicker.config import MAX_CARD_NAME_LEN
from deckpicker.deck import split_bulk


def validate_card_names(text: str, max_len: int = MAX_CARD_NAME_LEN) -> Tuple[bool, str | None]:
    names = split_bulk(text)
    if not names:
        return False, "Nothing to add. Send names separated by newline, comma, or semicolon."
    too_long = [n for n in names if len(n) > max_len]
    if too_long:
        return False, f"Card names must be at most {max_len} characters: {too_long[0][:20]}…"
    return True, None


def validate_search_query(text: str) -> Tuple[bool, str | None]:
    s = text.strip()
    if not s:
        return False, "Empty search. Send part of a card name (e.g. \"ger\")."
    if len(s) > MAX_CARD_NAME_LEN:
        return False, f"Search text must be at most {MAX_CARD_NAME_LEN} characters."
    return True, None
