from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, List, Optional

from .board import Direction, Tile, TileId
from .config import MAX_PLAYABLE_SIZE, MIN_PLAYABLE_SIZE, UNDO_LIMIT
from .levels import GameLevel, PenaltyType
from .moves import (
    MoveResult,
    apply_move_result,
    compute_move,
    is_game_over,
    validate_board,
)
from .spawn import forced_tile, perfect_board, spawn_tile
from .state import GameState

logger = logging.getLogger(__name__)

Observer = Callable[[str, "GameManager"], None]


class AnimationState(Enum):
    IDLE = "idle"
    SLIDING = "sliding"
    MERGING = "merging"


class GameManager:
    """
    Owns the mutable game: tiles, undo history, cheat counters and the clock.

    Every user input goes through the board engine once; the result is then
    applied in two steps (slide, then merge) before the next input is
    accepted. Front-ends that animate can call move(..., settle=False) and
    drive finish_slide()/finish_merge() themselves.
    """

    def __init__(
        self,
        board_size: int = 4,
        level: GameLevel = GameLevel.REGULAR,
        escalating_mode: bool = False,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        _check_size(board_size)
        self.board_size = board_size
        self.level = level
        self.escalating_mode = escalating_mode
        self.fast_animations = False
        self.tiles: List[Tile] = []
        self.undo_stack: List[List[Tile]] = []
        self.seconds = 0
        self.undos_used = 0
        self.manual_fours_used = 0
        self.deleted_tiles_count = 0
        self.animation_state = AnimationState.IDLE
        self._pending: Optional[MoveResult] = None
        self._observers: List[Observer] = []
        self._rng = rng if rng is not None else random.Random(seed)

    # ---------- observers ----------

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Registers a callback receiving (event, manager); returns an unsubscribe function."""
        self._observers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)
        return _unsubscribe

    def _notify(self, event: str) -> None:
        for cb in list(self._observers):
            cb(event, self)

    # ---------- derived values ----------

    @property
    def total_score(self) -> int:
        return sum(t.value for t in self.tiles)

    @property
    def cheats_used(self) -> int:
        return self.undos_used + self.manual_fours_used + self.deleted_tiles_count

    @property
    def is_idle(self) -> bool:
        return self.animation_state is AnimationState.IDLE

    def is_game_over(self) -> bool:
        return is_game_over(self.tiles, self.board_size)

    @property
    def game_state(self) -> GameState:
        return GameState(
            tiles=tuple(self.tiles),
            seconds=self.seconds,
            undo_stack=tuple(tuple(snap) for snap in self.undo_stack),
            level=self.level,
            board_size=self.board_size,
            undos_used=self.undos_used,
            manual_fours_used=self.manual_fours_used,
            deleted_tiles_count=self.deleted_tiles_count,
            escalating_mode=self.escalating_mode,
            fast_animations=self.fast_animations,
        )

    def apply_game_state(self, state: GameState) -> None:
        """Replaces the whole game with a saved snapshot. The tiles and undo history are validated first."""
        _check_size(state.board_size)
        validate_board(state.tiles, state.board_size)
        for snap in state.undo_stack:
            validate_board(snap, state.board_size)
        self.board_size = state.board_size
        self.tiles = list(state.tiles)
        self.undo_stack = [list(snap) for snap in state.undo_stack][-UNDO_LIMIT:]
        self.seconds = state.seconds
        self.level = state.level
        self.undos_used = state.undos_used
        self.manual_fours_used = state.manual_fours_used
        self.deleted_tiles_count = state.deleted_tiles_count
        self.escalating_mode = state.escalating_mode
        self.fast_animations = state.fast_animations
        self.animation_state = AnimationState.IDLE
        self._pending = None
        logger.info("Applied game state (%d tiles, score %d)", len(self.tiles), self.total_score)
        self._notify("state")

    # ---------- game mechanics ----------

    def new_game(self) -> None:
        self.tiles = []
        self.undo_stack = []
        self.seconds = 0
        self.undos_used = 0
        self.manual_fours_used = 0
        self.deleted_tiles_count = 0
        self.animation_state = AnimationState.IDLE
        self._pending = None
        self._spawn()
        self._spawn()
        logger.info("New %dx%d game on level %s", self.board_size, self.board_size, self.level.value)
        self._notify("new_game")

    def set_board_size(self, size: int) -> None:
        _check_size(size)
        if size != self.board_size:
            self.board_size = size
            self.new_game()

    def _spawn(self) -> Optional[Tile]:
        tile = spawn_tile(self.tiles, self.board_size, self._rng, self.level, self.escalating_mode)
        if tile is not None:
            self.tiles.append(tile)
        return tile

    def add_random_tile(self) -> Optional[Tile]:
        tile = self._spawn()
        if tile is not None:
            self._notify("spawned")
        return tile

    def move(self, direction: Direction, settle: bool = True) -> Optional[MoveResult]:
        """
        Computes and applies one move. Returns None when a previous move is
        still settling; otherwise the engine's MoveResult (moved=False means
        the board was left untouched and no tile spawned).
        """
        if not self.is_idle:
            logger.debug("Ignoring %s: move in progress (%s)", direction.value, self.animation_state.value)
            return None

        result = compute_move(self.tiles, self.board_size, direction)
        if not result.moved:
            return result

        if len(self.undo_stack) >= UNDO_LIMIT:
            self.undo_stack.pop(0)
        self.undo_stack.append(list(self.tiles))

        # Slide only; merges are applied in finish_slide().
        slid = MoveResult(targets=result.targets, merges=(), moved=True)
        self.tiles = apply_move_result(self.tiles, slid)
        self._pending = result
        self.animation_state = AnimationState.SLIDING
        self._notify("moved")
        if settle:
            self.finish_slide()
            self.finish_merge()
        return result

    def finish_slide(self) -> None:
        if self.animation_state is not AnimationState.SLIDING or self._pending is None:
            raise RuntimeError(f"finish_slide() called while {self.animation_state.value}")
        merges = self._pending.merges
        if merges:
            done = MoveResult(targets={}, merges=merges, moved=True)
            self.tiles = apply_move_result(self.tiles, done)
        self.animation_state = AnimationState.MERGING
        self._notify("merged")

    def finish_merge(self) -> None:
        if self.animation_state is not AnimationState.MERGING:
            raise RuntimeError(f"finish_merge() called while {self.animation_state.value}")
        self._pending = None
        self.animation_state = AnimationState.IDLE
        if self.add_random_tile() is not None:
            self._add_penalty(PenaltyType.GAME_LEVEL)

    # ---------- cheats ----------

    def undo(self) -> bool:
        if not self.is_idle or not self.undo_stack:
            return False
        self.tiles = self.undo_stack.pop()
        self.undos_used += 1
        self._add_penalty(PenaltyType.UNDO)
        self._notify("undo")
        return True

    def force_tile(self) -> Optional[Tile]:
        """Places a 4 on a random empty cell."""
        if not self.is_idle:
            return None
        tile = forced_tile(self.tiles, self.board_size, self._rng, value=4)
        if tile is None:
            return None
        self.tiles.append(tile)
        self.manual_fours_used += 1
        self._add_penalty(PenaltyType.ADD_FOUR)
        self._notify("spawned")
        return tile

    def delete_tile(self, tile_id: TileId) -> bool:
        if not self.is_idle:
            return False
        remaining = [t for t in self.tiles if t.id != tile_id]
        if len(remaining) == len(self.tiles):
            return False
        self.tiles = remaining
        self.deleted_tiles_count += 1
        self._notify("state")
        return True

    def set_perfect_board(self) -> None:
        self.tiles = perfect_board(self.board_size)
        self.undo_stack = []
        self._notify("state")

    # ---------- clock ----------

    def tick(self, seconds: int = 1) -> None:
        """Advances the elapsed-time counter while a game is on the board."""
        if self.tiles:
            self.seconds += seconds

    def _add_penalty(self, kind: PenaltyType) -> None:
        amount = kind.amount(self.level)
        self.seconds = max(0, self.seconds + amount)
        if amount:
            logger.debug("%s penalty: %+d s", kind.value, amount)


def _check_size(size: int) -> None:
    if not isinstance(size, int) or not (MIN_PLAYABLE_SIZE <= size <= MAX_PLAYABLE_SIZE):
        raise ValueError(f"Board size must be between {MIN_PLAYABLE_SIZE} and {MAX_PLAYABLE_SIZE}, got {size!r}")
