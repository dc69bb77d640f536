from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv


load_dotenv()

ROOT_DIR: Final[Path] = Path(__file__).resolve().parents[1]
DATA_DIR: Final[Path] = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)
DB_PATH: Final[Path] = DATA_DIR / "deck.db"

BOT_TOKEN: Final[str] = os.getenv("BOT_TOKEN", "")
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()

# Rolling draw timings, all in milliseconds
ROLL_BASE_DELAY_MS: Final[int] = int(os.getenv("ROLL_BASE_DELAY_MS", "35"))
ROLL_GROWTH_FACTOR: Final[float] = float(os.getenv("ROLL_GROWTH_FACTOR", "1.08"))
ROLL_GROWTH_STEP_MS: Final[int] = int(os.getenv("ROLL_GROWTH_STEP_MS", "6"))
ROLL_STEPS_PER_CARD: Final[int] = int(os.getenv("ROLL_STEPS_PER_CARD", "3"))
ROLL_MIN_STEPS: Final[int] = int(os.getenv("ROLL_MIN_STEPS", "18"))
ROLL_MAX_STEPS: Final[int] = int(os.getenv("ROLL_MAX_STEPS", "40"))
ROLL_DEADLINE_MS: Final[int] = int(os.getenv("ROLL_DEADLINE_MS", "5000"))
ROLL_SETTLE_MS: Final[int] = int(os.getenv("ROLL_SETTLE_MS", "250"))

# Minimum seconds between two edits of the rolling message (Telegram rate limits)
ROLL_RENDER_INTERVAL: Final[float] = float(os.getenv("ROLL_RENDER_INTERVAL", "0.5"))

PAGE_SIZE: Final[int] = 25
MAX_CARD_NAME_LEN: Final[int] = 100
