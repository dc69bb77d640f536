#!/usr/bin/env python3
"""Export a user's deck from SQLite to CSV.

Usage:
    python scripts/export_cards.py 123456789 data/deck.csv
"""
from __future__ import annotations

import argparse
import asyncio
import csv
from pathlib import Path
from typing import Iterable

from deckpicker.db import init_db, list_cards
from deckpicker.models import Card


HEADER = ["name", "done", "created_at"]


def card_rows(cards: Iterable[Card]) -> list[tuple[str, str, int]]:
    return [(c.name, "true" if c.done else "false", c.created_at) for c in cards]


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("user_id", type=int, help="Telegram user id owning the deck")
    parser.add_argument("csv_path", type=Path, help="Output CSV path")
    args = parser.parse_args()

    await init_db()
    rows_out = card_rows(await list_cards(args.user_id))
    with args.csv_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(HEADER)
        writer.writerows(rows_out)
    print(f"Exported {len(rows_out)} cards to {args.csv_path}")


if __name__ == "__main__":
    asyncio.run(main())
