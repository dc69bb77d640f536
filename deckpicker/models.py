from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Outcome = Literal["finished", "deadline"]


@dataclass(frozen=True)
class Card:
    id: str
    name: str
    done: bool
    created_at: int  # epoch milliseconds, ordering key


@dataclass(frozen=True)
class Page:
    items: list[Card]
    page: int
    total_pages: int
    start: int  # 0-based index of the first item in the filtered list
    end: int  # exclusive
    total: int
