from __future__ import annotations

import math
import re
from typing import Iterable, Sequence

from deckpicker.config import PAGE_SIZE
from deckpicker.models import Card, Page


_BULK_SEP_RE = re.compile(r"[\n,;]+")


def split_bulk(text: str) -> list[str]:
    """Split pasted text on newlines, commas and semicolons; drop blanks."""
    return [s.strip() for s in _BULK_SEP_RE.split(text) if s.strip()]


def filter_new_names(existing: Iterable[str], candidates: Iterable[str]) -> list[str]:
    """Return candidates not already in the deck, case-insensitively.

    - Names are trimmed; blanks are skipped.
    - Within the batch only the first spelling of a name is kept.
    """
    seen = {name.lower() for name in existing}
    picked: list[str] = []
    for raw in candidates:
        name = raw.strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        picked.append(name)
    return picked


def eligible_cards(cards: Iterable[Card]) -> list[Card]:
    return [c for c in cards if not c.done]


def sort_for_listing(cards: Sequence[Card]) -> list[Card]:
    # Unchecked first; sorted() is stable so store order is kept within groups
    return sorted(cards, key=lambda c: c.done)


def search_cards(cards: Sequence[Card], query: str) -> list[Card]:
    q = query.strip().lower()
    if not q:
        return list(cards)
    return [c for c in cards if q in c.name.lower()]


def paginate(items: Sequence[Card], page: int, page_size: int = PAGE_SIZE) -> Page:
    """Slice one page out of ``items``; ``page`` is 1-based and clamped."""
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    end = min(start + page_size, total)
    return Page(
        items=list(items[start:end]),
        page=page,
        total_pages=total_pages,
        start=start,
        end=end,
        total=total,
    )
