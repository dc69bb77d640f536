#!/usr/bin/env python3
"""Seed a user's deck with card names from a text file.

Names are separated by newline, comma, or semicolon. Lines starting with
"#" are comments. Names already in the deck are skipped (case-insensitive).

Usage:
    python scripts/seed_cards.py 123456789 data/countries.txt
"""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from deckpicker.config import MAX_CARD_NAME_LEN
from deckpicker.db import ensure_user, init_db, insert_cards
from deckpicker.deck import split_bulk


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("user_id", type=int, help="Telegram user id owning the deck")
    parser.add_argument("path", type=Path, help="Path to a text file with card names")
    args = parser.parse_args()

    names = parse_seed_text(args.path.read_text(encoding="utf-8"))
    await init_db()
    await ensure_user(args.user_id)
    added = await insert_cards(args.user_id, names)
    print(f"Imported {len(added)} of {len(names)} cards into the deck of user {args.user_id}.")


def parse_seed_text(text: str) -> list[str]:
    """Return card names from seed text, validating their length."""
    lines = [ln for ln in text.splitlines() if not ln.lstrip().startswith("#")]
    names = split_bulk("\n".join(lines))
    for i, name in enumerate(names, start=1):
        if len(name) > MAX_CARD_NAME_LEN:
            raise SystemExit(f"Name {i} is longer than {MAX_CARD_NAME_LEN} characters: {name[:20]}…")
    return names


if __name__ == "__main__":
    asyncio.run(main())
