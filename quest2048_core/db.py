from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from .codec import json_to_state, state_to_json
from .config import RECORD_NAME
from .moves import ValidationError
from .state import GameState

logger = logging.getLogger(__name__)


class GameDataError(Exception):
    """Base class for save/load failures."""


class DecodingError(GameDataError):
    pass


class NoGameFound(GameDataError):
    pass


class ConflictError(GameDataError):
    """The stored record changed since it was read."""


class LocalSaveFailure(GameDataError):
    pass


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for a file exists before writing to it."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        pass
    candidates = [
        os.getenv('QUEST_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        tempfile.gettempdir(),
    ]
    base = os.path.basename(db_path) or 'quest2048.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    return base


def _decode(text: str) -> GameState:
    try:
        return json_to_state(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DecodingError(f"Could not decode saved game: {e}") from e


# ---------- local file ----------

def save_local(path: str, state: GameState) -> None:
    """Writes the game as JSON, replacing the file atomically."""
    try:
        _ensure_db_dir(path)
        directory = os.path.dirname(path) or '.'
        fd, tmp = tempfile.mkstemp(prefix='.quest2048-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(state_to_json(state), fh)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
    except OSError as e:
        raise LocalSaveFailure(f"Could not save game to {path}: {e}") from e


def load_local(path: str) -> GameState:
    if not os.path.isfile(path):
        raise NoGameFound(f"No saved game at {path}")
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            text = fh.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DecodingError(f"Could not read saved game at {path}: {e}") from e
    return _decode(text)


# ---------- versioned document store ----------

def _ensure_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            name TEXT PRIMARY KEY,
            version INTEGER NOT NULL,
            payload TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


class DocumentStore:
    """
    Remote-style record store keyed by name. Every write bumps the record's
    version, and save() only succeeds when the caller read the current
    version (optimistic concurrency).
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = _resolve_db_path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        _ensure_db(conn)
        return conn

    def fetch(self, name: str) -> Tuple[int, str]:
        """Returns (version, payload) or raises NoGameFound."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT version, payload FROM records WHERE name = ?", (name,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise NoGameFound(f"No record named {name!r}")
        return int(row[0]), str(row[1])

    def save(self, name: str, payload: str, expected_version: Optional[int]) -> int:
        """
        Conditional write. expected_version=None means "create"; otherwise the
        stored version must still equal it. Returns the new version.
        """
        now = datetime.now(timezone.utc).isoformat(timespec='seconds')
        conn = self._connect()
        try:
            if expected_version is None:
                try:
                    conn.execute(
                        "INSERT INTO records (name, version, payload, updated_at) VALUES (?, 1, ?, ?)",
                        (name, payload, now),
                    )
                except sqlite3.IntegrityError as e:
                    raise ConflictError(f"Record {name!r} already exists") from e
                conn.commit()
                return 1
            cur = conn.execute(
                "UPDATE records SET version = version + 1, payload = ?, updated_at = ? WHERE name = ? AND version = ?",
                (payload, now, name, expected_version),
            )
            if cur.rowcount != 1:
                raise ConflictError(f"Record {name!r} changed since version {expected_version}")
            conn.commit()
            return expected_version + 1
        finally:
            conn.close()

    def save_with_retry(self, name: str, build: Callable[[Optional[str]], str], retries: int = 3) -> int:
        """
        Reads the current record, builds the payload from it and writes it
        back conditionally. On conflict the read and build are repeated, up to
        `retries` extra attempts.
        """
        attempt = 0
        while True:
            try:
                version, current = self.fetch(name)
            except NoGameFound:
                version, current = None, None
            try:
                return self.save(name, build(current), version)
            except ConflictError:
                attempt += 1
                if attempt > retries:
                    raise
                logger.warning("Conflict saving %r, retrying (%d/%d)", name, attempt, retries)


class DataManager:
    """Saves games to the local file first, then to the document store."""

    def __init__(self, save_path: str, db_path: str, record_name: str = RECORD_NAME) -> None:
        self.save_path = save_path
        self.store = DocumentStore(db_path)
        self.record_name = record_name

    def load_local(self) -> GameState:
        logger.info("Loading local game")
        state = load_local(self.save_path)
        logger.info("Loaded local game")
        return state

    def save_local(self, state: GameState) -> None:
        save_local(self.save_path, state)

    def fetch_cloud(self) -> GameState:
        _, payload = self.store.fetch(self.record_name)
        return _decode(payload)

    def save_cloud(self, state: GameState, retries: int = 3) -> int:
        payload = json.dumps(state_to_json(state))
        # Last writer wins: a conflict only means the record must be re-read.
        return self.store.save_with_retry(self.record_name, lambda _current: payload, retries=retries)

    def save(self, state: GameState) -> None:
        logger.info("Saving game")
        self.save_local(state)
        logger.info("Saved locally, now saving to cloud")
        self.save_cloud(state)
        logger.info("Saved to cloud")

    def check_cloud_version(self, local: GameState) -> Optional[GameState]:
        """Returns the cloud game only when its score beats the local one."""
        logger.info("Checking cloud")
        try:
            cloud = self.fetch_cloud()
        except NoGameFound:
            logger.info("No cloud game found")
            return None
        if cloud.total_score > local.total_score:
            logger.info("Found higher scored game")
            return cloud
        logger.info("Local game is current")
        return None
