from __future__ import annotations

import pytest

from deckpicker.models import Card
from scripts.export_cards import HEADER, card_rows
from scripts.seed_cards import parse_seed_text


def test_parse_seed_text_skips_comments() -> None:
    text = "# countries\nFrance; Germany\n  # more\nJapan, Brazil\n\nSpain\n"
    assert parse_seed_text(text) == ["France", "Germany", "Japan", "Brazil", "Spain"]


def test_parse_seed_text_rejects_long_names() -> None:
    with pytest.raises(SystemExit):
        parse_seed_text("ok\n" + "x" * 500)


def test_export_rows() -> None:
    cards = [Card("a", "France", False, 10), Card("b", "Japan", True, 11)]
    assert HEADER == ["name", "done", "created_at"]
    assert card_rows(cards) == [("France", "false", 10), ("Japan", "true", 11)]
