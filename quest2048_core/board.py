from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

Coord = Tuple[int, int]
TileId = str

MIN_BOARD_SIZE = 2
DEFAULT_BOARD_SIZE = 4


@dataclass(frozen=True)
class Tile:
    """A numbered tile. The id is stable across moves and survives merges."""
    id: TileId
    value: int
    row: int
    col: int

    @property
    def pos(self) -> Coord:
        return (self.row, self.col)

    def moved_to(self, pos: Coord) -> 'Tile':
        return replace(self, row=pos[0], col=pos[1])

    def with_value(self, value: int) -> 'Tile':
        return replace(self, value=value)


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_horizontal(self) -> bool:
        """Left/right sweep along rows, up/down along columns."""
        return self in (Direction.LEFT, Direction.RIGHT)

    @property
    def ascending(self) -> bool:
        """Left/up compact toward index 0, right/down toward the far edge."""
        return self in (Direction.LEFT, Direction.UP)

    @classmethod
    def parse(cls, text: str) -> 'Direction':
        key = str(text).strip().lower()
        if key in _KEY_ALIASES:
            return _KEY_ALIASES[key]
        for d in cls:
            if d.value == key:
                return d
        raise ValueError(f"Unknown direction: {text!r}")


_KEY_ALIASES: Dict[str, Direction] = {
    'w': Direction.UP,
    'a': Direction.LEFT,
    's': Direction.DOWN,
    'd': Direction.RIGHT,
}


def occupancy(tiles: Iterable[Tile]) -> Dict[Coord, Tile]:
    """Maps each occupied cell to its tile (last one wins on duplicates)."""
    return {t.pos: t for t in tiles}


def pretty(tiles: Iterable[Tile], board_size: int, cell_width: Optional[int] = None) -> str:
    """Generates a human-readable grid of the tile values, '.' for empty cells."""
    cells = occupancy(tiles)
    if cell_width is None:
        widest = max((len(str(t.value)) for t in cells.values()), default=1)
        cell_width = max(widest, 1)
    lines: List[str] = []
    for r in range(board_size):
        row: List[str] = []
        for c in range(board_size):
            tile = cells.get((r, c))
            row.append((str(tile.value) if tile else '.').rjust(cell_width))
        lines.append(" ".join(row))
    return "\n".join(lines)
