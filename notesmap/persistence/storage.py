"""
Storage Backends
================

The persistence manager talks to a single-slot text store. Backends:

- MemoryStorage:   process memory only (tests, ephemeral sessions)
- JsonFileStorage: one JSON file on disk
- SqliteStorage:   key/value row in a SQLite database

Every backend raises StorageUnavailable for I/O problems so the manager has
exactly one thing to catch.
"""

import logging
import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """Backend could not be read or written (missing, full, locked...)."""
    pass


class StorageBackend:
    """Single-slot text storage port."""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, text: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryStorage(StorageBackend):

    def __init__(self, initial: Optional[str] = None):
        self.value = initial
        self.writes = 0

    def load(self) -> Optional[str]:
        return self.value

    def save(self, text: str) -> None:
        self.value = text
        self.writes += 1

    def clear(self) -> None:
        self.value = None


class JsonFileStorage(StorageBackend):
    """Whole document in one file; written via a temp file then renamed."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {self.path}: {e}") from e

    def save(self, text: str) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding='utf-8')
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {self.path}: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailable(f"Cannot remove {self.path}: {e}") from e


class SqliteStorage(StorageBackend):
    """Key/value slot in a SQLite table.

    Each call connects and disconnects so the caller never manages the
    connection lifecycle.
    """

    TABLE = 'kv_store'

    def __init__(self, db_path, key: str = 'financelab_mindmap_v1'):
        self.db_path = str(db_path)
        self.key = key

    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.TABLE} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        return conn

    def load(self) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    f"SELECT value FROM {self.TABLE} WHERE key = ?", (self.key,)
                ).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"Cannot read {self.db_path}: {e}") from e
        return row[0] if row else None

    def save(self, text: str) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        f"INSERT OR REPLACE INTO {self.TABLE} (key, value, updated_at) VALUES (?, ?, ?)",
                        (self.key, text, datetime.now().isoformat()),
                    )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"Cannot write {self.db_path}: {e}") from e

    def clear(self) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(f"DELETE FROM {self.TABLE} WHERE key = ?", (self.key,))
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"Cannot clear {self.db_path}: {e}") from e


def create_storage(settings) -> StorageBackend:
    """Backend selected by settings.STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND
    logger.debug("Using %s storage (%s)", backend, settings.STORAGE_PATH)
    if backend == 'memory':
        return MemoryStorage()
    if backend == 'sqlite':
        return SqliteStorage(settings.STORAGE_PATH, settings.STORAGE_KEY)
    if backend == 'file':
        return JsonFileStorage(settings.STORAGE_PATH)
    raise ValueError(f"Unknown storage backend: {backend!r}")
