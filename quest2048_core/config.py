from __future__ import annotations

import os

from .board import DEFAULT_BOARD_SIZE

# Allowed board sizes offered by the settings picker.
MIN_PLAYABLE_SIZE = 4
MAX_PLAYABLE_SIZE = 10

UNDO_LIMIT = 20
RECORD_NAME = "currentGame"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


DEFAULT_DB = os.getenv("QUEST_DB", os.path.join("data", "quest2048.db"))
DEFAULT_SAVE_FILE = os.getenv("QUEST_SAVE_FILE", os.path.join("data", "Quest2048.json"))
DEFAULT_SIZE = _env_int("QUEST_BOARD_SIZE", DEFAULT_BOARD_SIZE)
LOG_LEVEL = os.getenv("QUEST_LOG_LEVEL", "INFO").upper()
