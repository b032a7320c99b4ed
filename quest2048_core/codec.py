from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .board import DEFAULT_BOARD_SIZE, Tile
from .levels import GameLevel
from .moves import MergeEvent, MoveResult, ValidationError
from .state import GameState


def tile_to_json(t: Tile) -> Dict[str, Any]:
    return {"id": str(t.id), "value": int(t.value), "row": int(t.row), "col": int(t.col)}


def _json_int(obj: Dict[str, Any], key: str) -> int:
    value = obj[key]
    # bool is an int subclass; floats and numeric strings are rejected, not rounded.
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer, got {value!r}")
    return value


def tile_from_json(obj: Dict[str, Any]) -> Tile:
    if not isinstance(obj, dict):
        raise ValidationError(f"bad tile: expected an object, got {obj!r}")
    try:
        return Tile(
            id=str(obj["id"]),
            value=_json_int(obj, "value"),
            row=_json_int(obj, "row"),
            col=_json_int(obj, "col"),
        )
    except KeyError as e:
        raise ValidationError(f"bad tile: missing {e}") from e


def tiles_to_json(tiles) -> List[Dict[str, Any]]:
    return [tile_to_json(t) for t in tiles]


def tiles_from_json(items: Any) -> Tuple[Tile, ...]:
    if not isinstance(items, list):
        raise ValidationError("tiles must be a list")
    return tuple(tile_from_json(it) for it in items)


def result_to_json(result: MoveResult) -> Dict[str, Any]:
    return {
        "targets": {tid: [int(r), int(c)] for tid, (r, c) in result.targets.items()},
        "merges": [
            {"survivor": m.survivor_id, "absorbed": m.absorbed_id, "newValue": int(m.new_value)}
            for m in result.merges
        ],
        "moved": bool(result.moved),
    }


def result_from_json(obj: Dict[str, Any]) -> MoveResult:
    try:
        targets = {str(tid): (int(rc[0]), int(rc[1])) for tid, rc in obj["targets"].items()}
        merges = tuple(
            MergeEvent(str(m["survivor"]), str(m["absorbed"]), int(m["newValue"])) for m in obj.get("merges", [])
        )
        return MoveResult(targets=targets, merges=merges, moved=bool(obj["moved"]))
    except (KeyError, TypeError, ValueError, AttributeError, IndexError) as e:
        raise ValidationError(f"bad move result: {e}") from e


def state_to_json(s: GameState) -> Dict[str, Any]:
    """Encodes a snapshot with the camelCase keys used by saved games."""
    return {
        "tiles": tiles_to_json(s.tiles),
        "seconds": int(s.seconds),
        "undoStack": [tiles_to_json(snap) for snap in s.undo_stack],
        "gameLevel": s.level.value,
        "boardSize": int(s.board_size),
        "undosUsed": int(s.undos_used),
        "manual4sUsed": int(s.manual_fours_used),
        "deletedTilesCount": int(s.deleted_tiles_count),
        "escalatingMode": bool(s.escalating_mode),
        "fastAnimations": bool(s.fast_animations),
    }


def json_to_state(obj: Dict[str, Any]) -> GameState:
    """Decodes a snapshot. Missing counters default to zero; malformed values raise ValidationError."""
    if not isinstance(obj, dict):
        raise ValidationError("state must be an object")
    try:
        undo_raw = obj.get("undoStack", [])
        if not isinstance(undo_raw, list):
            raise ValidationError("undoStack must be a list")
        return GameState(
            tiles=tiles_from_json(obj.get("tiles", [])),
            seconds=int(obj.get("seconds", 0)),
            undo_stack=tuple(tiles_from_json(snap) for snap in undo_raw),
            level=GameLevel.parse(obj.get("gameLevel", GameLevel.REGULAR.value)),
            board_size=_json_int(obj, "boardSize") if "boardSize" in obj else DEFAULT_BOARD_SIZE,
            undos_used=int(obj.get("undosUsed", 0)),
            manual_fours_used=int(obj.get("manual4sUsed", 0)),
            deleted_tiles_count=int(obj.get("deletedTilesCount", 0)),
            escalating_mode=bool(obj.get("escalatingMode", False)),
            fast_animations=bool(obj.get("fastAnimations", False)),
        )
    except ValidationError:
        raise
    except (TypeError, ValueError) as e:
        raise ValidationError(f"bad state: {e}") from e
