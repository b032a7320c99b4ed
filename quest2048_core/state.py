from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .board import DEFAULT_BOARD_SIZE, Tile
from .levels import GameLevel


@dataclass(frozen=True)
class GameState:
    """Snapshot of everything a saved game needs: the tiles plus the ancillary counters."""
    tiles: Tuple[Tile, ...] = ()
    seconds: int = 0
    undo_stack: Tuple[Tuple[Tile, ...], ...] = ()
    level: GameLevel = GameLevel.REGULAR
    board_size: int = DEFAULT_BOARD_SIZE
    undos_used: int = 0
    manual_fours_used: int = 0
    deleted_tiles_count: int = 0
    escalating_mode: bool = False
    fast_animations: bool = False

    @property
    def total_score(self) -> int:
        return sum(t.value for t in self.tiles)

    @property
    def cheats_used(self) -> int:
        return self.undos_used + self.manual_fours_used + self.deleted_tiles_count

    @property
    def highest_tile(self) -> int:
        return max((t.value for t in self.tiles), default=0)
