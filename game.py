from __future__ import annotations

# Facade module that re-exports the Quest2048 core.
# Kept so the Flask app, the CLI entry point and tests have one import site.
# Single-responsibility modules live under quest2048_core/*.

from quest2048_core.board import Coord, Direction, Tile, TileId, pretty  # noqa: F401
from quest2048_core.moves import (  # noqa: F401
    MergeEvent,
    MoveResult,
    ValidationError,
    apply_move_result,
    compute_move,
    empty_positions,
    is_game_over,
    legal_directions,
    score_gained,
    validate_board,
)
from quest2048_core.levels import GameLevel, PenaltyType  # noqa: F401
from quest2048_core.spawn import (  # noqa: F401
    escalation_base,
    forced_tile,
    new_tile_id,
    perfect_board,
    spawn_tile,
    spawn_value,
)
from quest2048_core.state import GameState  # noqa: F401
from quest2048_core.codec import (  # noqa: F401
    json_to_state,
    result_from_json,
    result_to_json,
    state_to_json,
    tiles_from_json,
    tiles_to_json,
)
from quest2048_core.manager import AnimationState, GameManager  # noqa: F401
from quest2048_core.db import (  # noqa: F401
    ConflictError,
    DataManager,
    DecodingError,
    DocumentStore,
    GameDataError,
    LocalSaveFailure,
    NoGameFound,
    load_local,
    save_local,
)


def main() -> None:
    # CLI driver delegated to quest2048_core.cli
    from quest2048_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
