from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from game import (
    DataManager,
    Direction,
    GameDataError,
    GameLevel,
    GameManager,
    GameState,
    NoGameFound,
    ValidationError,
    compute_move,
    json_to_state,
    legal_directions,
    result_to_json,
    state_to_json,
    tiles_from_json,
    validate_board,
)
from quest2048_core.config import DEFAULT_DB, DEFAULT_SAVE_FILE, DEFAULT_SIZE

logger = logging.getLogger(__name__)

# Read at request time so tests can point them at temporary files.
DB_PATH = DEFAULT_DB
SAVE_FILE = DEFAULT_SAVE_FILE

app = Flask(__name__)


def _data_manager() -> DataManager:
    return DataManager(SAVE_FILE, DB_PATH)


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise ValidationError("JSON object body required")
    return body


def _optional_seed(body: Dict[str, Any]) -> Optional[int]:
    seed = body.get("seed")
    return int(seed) if seed is not None else None


def _manager_from(body: Dict[str, Any]) -> GameManager:
    """Rebuilds a manager around the state carried in the request."""
    if "state" not in body:
        raise ValidationError("state required")
    state = json_to_state(body["state"])
    manager = GameManager(board_size=state.board_size, level=state.level, seed=_optional_seed(body))
    manager.apply_game_state(state)
    return manager


def _game_json(state: GameState) -> Dict[str, Any]:
    legal = legal_directions(state.tiles, state.board_size)
    return {
        "ok": True,
        "state": state_to_json(state),
        "score": state.total_score,
        "cheatsUsed": state.cheats_used,
        "legalDirections": [d.value for d in legal],
        "gameOver": not legal,
    }


@app.errorhandler(ValueError)
def handle_bad_input(e: ValueError) -> Any:
    return jsonify({"ok": False, "error": str(e)}), 400


@app.errorhandler(GameDataError)
def handle_data_error(e: GameDataError) -> Any:
    status = 404 if isinstance(e, NoGameFound) else 500
    return jsonify({"ok": False, "error": str(e)}), status


# ---------- Game API ----------

@app.get("/api/levels")
def api_levels() -> Any:
    return jsonify({
        "ok": True,
        "levels": [
            {
                "name": lvl.value,
                "description": lvl.description,
                "probabilityOfFours": lvl.probability_of_fours,
                "penalty": lvl.penalty_string,
            }
            for lvl in GameLevel
        ],
    })


@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    if not isinstance(body, dict):
        raise ValidationError("JSON object body required")
    size = int(body.get("size", DEFAULT_SIZE))
    level = GameLevel.parse(body.get("level", GameLevel.REGULAR.value))
    manager = GameManager(
        board_size=size,
        level=level,
        escalating_mode=bool(body.get("escalating", False)),
        seed=_optional_seed(body),
    )
    manager.new_game()
    return jsonify(_game_json(manager.game_state))


@app.post("/api/compute")
def api_compute() -> Any:
    """Runs the board engine alone: tiles + boardSize + direction in, MoveResult out."""
    body = _body()
    tiles = tiles_from_json(body.get("tiles", []))
    size = int(body.get("boardSize", DEFAULT_SIZE))
    direction = Direction.parse(body.get("direction", ""))
    result = compute_move(tiles, size, direction)
    return jsonify({"ok": True, "result": result_to_json(result)})


@app.post("/api/legal")
def api_legal() -> Any:
    body = _body()
    state = json_to_state(body.get("state"))
    return jsonify({"ok": True, "legalDirections": [d.value for d in legal_directions(state.tiles, state.board_size)]})


@app.post("/api/move")
def api_move() -> Any:
    body = _body()
    manager = _manager_from(body)
    direction = Direction.parse(body.get("direction", ""))
    result = manager.move(direction)
    out = _game_json(manager.game_state)
    out["result"] = result_to_json(result)
    return jsonify(out)


@app.post("/api/undo")
def api_undo() -> Any:
    manager = _manager_from(_body())
    undone = manager.undo()
    out = _game_json(manager.game_state)
    out["undone"] = undone
    return jsonify(out)


@app.post("/api/force")
def api_force() -> Any:
    manager = _manager_from(_body())
    tile = manager.force_tile()
    out = _game_json(manager.game_state)
    out["forced"] = tile is not None
    return jsonify(out)


@app.post("/api/delete")
def api_delete() -> Any:
    body = _body()
    manager = _manager_from(body)
    if not manager.delete_tile(str(body.get("id", ""))):
        return jsonify({"ok": False, "error": "No tile with that id"}), 404
    return jsonify(_game_json(manager.game_state))


@app.post("/api/perfect")
def api_perfect() -> Any:
    manager = _manager_from(_body())
    manager.set_perfect_board()
    return jsonify(_game_json(manager.game_state))


@app.post("/api/save")
def api_save() -> Any:
    body = _body()
    state = json_to_state(body.get("state"))
    validate_board(state.tiles, state.board_size)
    _data_manager().save(state)
    logger.info("Saved game with score %d", state.total_score)
    return jsonify({"ok": True})


@app.post("/api/load")
def api_load() -> Any:
    """Loads the local save; the cloud copy wins when its score is higher."""
    data = _data_manager()
    source = "local"
    try:
        state = data.load_local()
    except NoGameFound:
        state = None
    cloud = data.check_cloud_version(state if state is not None else GameState())
    if cloud is not None:
        state, source = cloud, "cloud"
    if state is None:
        raise NoGameFound("No saved game")
    out = _game_json(state)
    out["source"] = source
    return jsonify(out)


if __name__ == "__main__":
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.INFO,
    )
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=bool(os.environ.get("FLASK_DEBUG")))
