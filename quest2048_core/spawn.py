from __future__ import annotations

import random
import uuid
from typing import Iterable, List, Optional

from .board import Tile, TileId
from .levels import GameLevel
from .moves import empty_positions


def new_tile_id() -> TileId:
    """Ids are never reused, so a fresh uuid4 per tile is enough."""
    return uuid.uuid4().hex


def spawn_value(rng: random.Random, level: GameLevel, base: int = 2) -> int:
    """Picks `base` or `2 * base`, the latter with the level's probability of fours."""
    return base * 2 if rng.random() < level.probability_of_fours else base


def escalation_base(tiles: Iterable[Tile]) -> int:
    """Smallest value on the board (at least 2). Once the 2s are gone, spawns become 4s and 8s."""
    return max(2, min((t.value for t in tiles), default=2))


def spawn_tile(
    tiles: Iterable[Tile],
    board_size: int,
    rng: random.Random,
    level: GameLevel = GameLevel.REGULAR,
    escalating: bool = False,
) -> Optional[Tile]:
    """Creates a tile on a uniformly chosen empty cell, or None when the board is full."""
    tiles = list(tiles)
    free = empty_positions(tiles, board_size)
    if not free:
        return None
    row, col = rng.choice(free)
    base = escalation_base(tiles) if escalating else 2
    return Tile(id=new_tile_id(), value=spawn_value(rng, level, base), row=row, col=col)


def forced_tile(tiles: Iterable[Tile], board_size: int, rng: random.Random, value: int = 4) -> Optional[Tile]:
    free = empty_positions(tiles, board_size)
    if not free:
        return None
    row, col = rng.choice(free)
    return Tile(id=new_tile_id(), value=value, row=row, col=col)


def perfect_board(board_size: int) -> List[Tile]:
    """Fills the board row-major with descending powers of two ending at 4 (131072..4 on 4x4)."""
    cells = board_size * board_size
    out: List[Tile] = []
    for i in range(cells):
        value = 2 ** (cells + 1 - i)
        out.append(Tile(id=new_tile_id(), value=value, row=i // board_size, col=i % board_size))
    return out
