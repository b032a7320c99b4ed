"""
Quest2048 core Python package.

This package contains the tile data structures and the pure board engine
used by the game manager, the Flask app and the terminal client.
Modules:
- board.py: Tile, Direction, Coord
- moves.py: compute_move and helpers (the board engine)
- levels.py, spawn.py: spawn policy
- state.py, codec.py: GameState snapshot and JSON encoding
- manager.py: GameManager (mutable game state, undo, cheats)
- db.py: local file and versioned document store persistence
"""
