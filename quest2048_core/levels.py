from __future__ import annotations

from enum import Enum


class GameLevel(Enum):
    """Spawn difficulty. The value is the name stored in saved games."""
    ONLY_TWOS = "onlyTwos"
    REGULAR = "regular"
    EASY = "easy"
    ONLY_FOURS = "onlyFours"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def probability_of_fours(self) -> float:
        return _PROBABILITY_OF_FOURS[self]

    @property
    def penalty_amount(self) -> int:
        """Seconds added to the clock for every spawned tile."""
        return _PENALTY[self]

    @property
    def penalty_string(self) -> str:
        return _PENALTY_STRING[self]

    @classmethod
    def parse(cls, text: str) -> 'GameLevel':
        key = str(text).strip()
        for level in cls:
            if key == level.value or key.upper() == level.name:
                return level
        raise ValueError(f"Unknown game level: {text!r}")


_DESCRIPTIONS = {
    GameLevel.ONLY_TWOS: "Only 2s",
    GameLevel.REGULAR: "2s > 4s",
    GameLevel.EASY: "2s < 4s",
    GameLevel.ONLY_FOURS: "Only 4s",
}

_PROBABILITY_OF_FOURS = {
    GameLevel.ONLY_TWOS: 0.0,
    GameLevel.REGULAR: 0.10,
    GameLevel.EASY: 0.90,
    GameLevel.ONLY_FOURS: 1.0,
}

_PENALTY = {
    GameLevel.ONLY_TWOS: -1,
    GameLevel.REGULAR: 0,
    GameLevel.EASY: 1,
    GameLevel.ONLY_FOURS: 2,
}

_PENALTY_STRING = {
    GameLevel.ONLY_TWOS: "Gain a second!",
    GameLevel.REGULAR: "No penalty.",
    GameLevel.EASY: "Lose 1 second.",
    GameLevel.ONLY_FOURS: "Lose 2 seconds!",
}


class PenaltyType(Enum):
    """Time penalties, in seconds, added on top of the level's own penalty."""
    UNDO = "Undo"
    ADD_FOUR = "Four"
    GAME_LEVEL = "Level"

    def amount(self, level: GameLevel) -> int:
        base = {PenaltyType.UNDO: 5, PenaltyType.ADD_FOUR: 20}.get(self, 0)
        return base + level.penalty_amount
