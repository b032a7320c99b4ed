from __future__ import annotations

import argparse
import logging
import time
from typing import Callable, List, Optional

from .board import Direction, pretty
from .config import (
    DEFAULT_DB,
    DEFAULT_SAVE_FILE,
    DEFAULT_SIZE,
    LOG_LEVEL,
    MAX_PLAYABLE_SIZE,
    MIN_PLAYABLE_SIZE,
)
from .db import DataManager, GameDataError, NoGameFound
from .levels import GameLevel
from .manager import GameManager

logger = logging.getLogger(__name__)

HELP = "Keys: w/a/s/d move, u undo, f force a 4, n new game, q save and quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Quest2048 terminal game')
    parser.add_argument('--size', type=int, default=DEFAULT_SIZE,
                        choices=range(MIN_PLAYABLE_SIZE, MAX_PLAYABLE_SIZE + 1), metavar='N',
                        help=f'Board size (NxN), {MIN_PLAYABLE_SIZE}-{MAX_PLAYABLE_SIZE}')
    parser.add_argument('--level', default=GameLevel.REGULAR.value,
                        choices=[lvl.value for lvl in GameLevel], help='Spawn level')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for tile spawns')
    parser.add_argument('--escalating', action='store_true', help='Spawn values grow as small tiles disappear')
    parser.add_argument('--save', default=DEFAULT_SAVE_FILE, help='Local save file (JSON)')
    parser.add_argument('--db', default=DEFAULT_DB, help='SQLite document store path')
    parser.add_argument('--new', action='store_true', help='Ignore saved games and start fresh')
    parser.add_argument('--log-level', default=LOG_LEVEL, help='Logging level')
    return parser


def render(manager: GameManager) -> str:
    header = (f"Score {manager.total_score}  Time {manager.seconds}s  "
              f"Undos {manager.undos_used}  4s {manager.manual_fours_used}")
    return header + "\n" + pretty(manager.tiles, manager.board_size)


def load_or_new(manager: GameManager, data: DataManager, fresh: bool) -> None:
    """Restores the local game, swapping in the cloud copy when it scores higher."""
    if fresh:
        manager.new_game()
        return
    try:
        manager.apply_game_state(data.load_local())
    except NoGameFound:
        manager.new_game()
    except (GameDataError, ValueError) as e:
        logger.warning("Could not load local game: %s", e)
        manager.new_game()
    try:
        cloud = data.check_cloud_version(manager.game_state)
    except GameDataError as e:
        logger.warning("Could not check cloud game: %s", e)
        return
    if cloud is not None:
        manager.apply_game_state(cloud)


def run(manager: GameManager, data: DataManager, read: Callable[[str], str] = input,
        write: Callable[[str], None] = print) -> None:
    write(HELP)
    write(render(manager))
    started = time.monotonic()
    credited = 0
    while True:
        try:
            text = read('> ').strip().lower()
        except EOFError:
            text = 'q'
        if text == 'q':
            data.save(manager.game_state)
            write('Saved.')
            return
        if text == 'u':
            if not manager.undo():
                write('Nothing to undo.')
        elif text == 'f':
            if manager.force_tile() is None:
                write('Board is full.')
        elif text == 'n':
            manager.new_game()
        else:
            try:
                direction = Direction.parse(text)
            except ValueError:
                write(HELP)
                continue
            result = manager.move(direction)
            if result is not None and not result.moved:
                write('Nothing moves that way.')
        due = int(time.monotonic() - started) - credited
        if due > 0:
            manager.tick(due)
            credited += due
        write(render(manager))
        if manager.is_game_over():
            write('Game over!')
            data.save(manager.game_state)
            return


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
    )
    manager = GameManager(
        board_size=args.size,
        level=GameLevel.parse(args.level),
        escalating_mode=args.escalating,
        seed=args.seed,
    )
    data = DataManager(args.save, args.db)
    load_or_new(manager, data, args.new)
    run(manager, data)
