from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from .board import MIN_BOARD_SIZE, Coord, Direction, Tile, TileId


class ValidationError(ValueError):
    """Raised when a board handed to the engine breaks its preconditions."""


@dataclass(frozen=True)
class MergeEvent:
    """Survivor keeps its id and takes new_value; the absorbed tile is removed."""
    survivor_id: TileId
    absorbed_id: TileId
    new_value: int


@dataclass(frozen=True)
class MoveResult:
    targets: Dict[TileId, Coord]
    merges: Tuple[MergeEvent, ...]
    moved: bool


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def validate_board(tiles: Sequence[Tile], board_size: int) -> None:
    """Fails fast on malformed input instead of repairing it."""
    if not isinstance(board_size, int) or board_size < MIN_BOARD_SIZE:
        raise ValidationError(f"board_size must be an integer >= {MIN_BOARD_SIZE}, got {board_size!r}")
    if len(tiles) > board_size * board_size:
        raise ValidationError(f"{len(tiles)} tiles do not fit on a {board_size}x{board_size} board")
    seen_pos: Set[Coord] = set()
    seen_ids: Set[TileId] = set()
    for t in tiles:
        if not all(isinstance(c, int) and not isinstance(c, bool) for c in (t.row, t.col)):
            raise ValidationError(f"tile {t.id} has non-integer position {t.pos!r}")
        if not (0 <= t.row < board_size and 0 <= t.col < board_size):
            raise ValidationError(f"tile {t.id} at {t.pos} is outside a {board_size}x{board_size} board")
        if t.pos in seen_pos:
            raise ValidationError(f"duplicate tile position {t.pos}")
        if t.id in seen_ids:
            raise ValidationError(f"duplicate tile id {t.id!r}")
        if not isinstance(t.value, int) or not _is_power_of_two(t.value) or t.value < 2:
            raise ValidationError(f"tile {t.id} has invalid value {t.value!r}")
        seen_pos.add(t.pos)
        seen_ids.add(t.id)


def _process_line(
    line_tiles: List[Tile],
    line_index: int,
    board_size: int,
    direction: Direction,
) -> Tuple[Dict[TileId, Coord], List[MergeEvent], bool]:
    """Compacts and merges one row or column toward the sweep edge."""
    targets: Dict[TileId, Coord] = {}
    merges: List[MergeEvent] = []
    moved = False
    if not line_tiles:
        return targets, merges, moved

    horizontal = direction.is_horizontal
    ascending = direction.ascending

    def sweep_index(t: Tile) -> int:
        return t.col if horizontal else t.row

    ordered = sorted(line_tiles, key=sweep_index, reverse=not ascending)
    pointer = 0 if ascending else board_size - 1
    step = 1 if ascending else -1

    i = 0
    while i < len(ordered):
        current = ordered[i]
        target: Coord = (line_index, pointer) if horizontal else (pointer, line_index)
        if i + 1 < len(ordered) and ordered[i + 1].value == current.value:
            absorbed = ordered[i + 1]
            targets[current.id] = target
            targets[absorbed.id] = target
            merges.append(MergeEvent(current.id, absorbed.id, current.value * 2))
            # A merge always changes the board, even if the survivor stays put.
            moved = True
            i += 2
        else:
            targets[current.id] = target
            if current.pos != target:
                moved = True
            i += 1
        pointer += step

    return targets, merges, moved


def compute_move(tiles: Iterable[Tile], board_size: int, direction: Direction) -> MoveResult:
    """
    Computes where every tile goes and which pairs merge when the board is
    slid toward `direction`. Each row (left/right) or column (up/down) is
    handled on its own; the result does not depend on line order.

    The engine never mutates or creates tiles. Use apply_move_result() to
    get the board after the move.
    """
    tiles = list(tiles)
    if not isinstance(direction, Direction):
        raise ValidationError(f"Unknown direction: {direction!r}")
    validate_board(tiles, board_size)

    lines: Dict[int, List[Tile]] = {i: [] for i in range(board_size)}
    for t in tiles:
        lines[t.row if direction.is_horizontal else t.col].append(t)

    all_targets: Dict[TileId, Coord] = {}
    all_merges: List[MergeEvent] = []
    moved = False
    for line_index in range(board_size):
        targets, merges, line_moved = _process_line(lines[line_index], line_index, board_size, direction)
        all_targets.update(targets)
        all_merges.extend(merges)
        moved = moved or line_moved

    return MoveResult(targets=all_targets, merges=tuple(all_merges), moved=moved)


def apply_move_result(tiles: Iterable[Tile], result: MoveResult) -> List[Tile]:
    """Slides every tile to its target, then doubles survivors and drops absorbed tiles."""
    new_values = {m.survivor_id: m.new_value for m in result.merges}
    absorbed = {m.absorbed_id for m in result.merges}
    out: List[Tile] = []
    for t in tiles:
        if t.id in absorbed:
            continue
        moved = t.moved_to(result.targets.get(t.id, t.pos))
        if t.id in new_values:
            moved = moved.with_value(new_values[t.id])
        out.append(moved)
    return out


def score_gained(result: MoveResult) -> int:
    return sum(m.new_value for m in result.merges)


def empty_positions(tiles: Iterable[Tile], board_size: int) -> List[Coord]:
    """Gets all empty cells in row-major order."""
    taken = {t.pos for t in tiles}
    return [(r, c) for r in range(board_size) for c in range(board_size) if (r, c) not in taken]


def legal_directions(tiles: Iterable[Tile], board_size: int) -> List[Direction]:
    tiles = list(tiles)
    return [d for d in Direction if compute_move(tiles, board_size, d).moved]


def is_game_over(tiles: Iterable[Tile], board_size: int) -> bool:
    return not legal_directions(tiles, board_size)
