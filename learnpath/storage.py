"""
KeyValueStorage - Durable on-device key-value store in SQLite.

Each key holds one opaque string blob that callers read and write in full.
Blocking SQLite calls run in a worker thread so awaiting callers do not
stall other screens.
"""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Optional

from learnpath.config import get_settings
from learnpath.errors import StorageError


logger = logging.getLogger(__name__)


class KeyValueStorage:
    """
    String key -> string blob store.

    Each operation opens its own connection, so instances can be shared
    between screens.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize storage.

        Args:
            db_path: Path to the database file (default: Settings.storage_path)
        """
        self.db_path = Path(db_path) if db_path else get_settings().storage_path
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
            try:
                conn.execute(
                    """CREATE TABLE IF NOT EXISTS kv (
                           key TEXT PRIMARY KEY,
                           value TEXT NOT NULL
                       )"""
                )
                conn.commit()
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open storage at {self.db_path}: {e}") from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    # -------------------------------------------------------------------------
    # Blocking operations
    # -------------------------------------------------------------------------

    def _get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def _set(self, key: str, value: str):
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO kv (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value)
            )
            conn.commit()
        finally:
            conn.close()

    def _remove(self, keys: list[str]):
        conn = self._get_connection()
        try:
            conn.executemany("DELETE FROM kv WHERE key = ?", [(key,) for key in keys])
            conn.commit()
        finally:
            conn.close()

    def _keys(self) -> list[str]:
        conn = self._get_connection()
        try:
            return [row["key"] for row in conn.execute("SELECT key FROM kv ORDER BY key")]
        finally:
            conn.close()

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            raise StorageError(f"Storage operation {func.__name__} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def get_item(self, key: str) -> Optional[str]:
        """Get the blob stored under key, or None."""
        return await self._run(self._get, key)

    async def set_item(self, key: str, value: str):
        """Store value under key, replacing any previous blob."""
        await self._run(self._set, key, value)
        logger.debug("Stored %d bytes under %s", len(value), key)

    async def remove_item(self, key: str):
        """Remove key if present."""
        await self._run(self._remove, [key])

    async def multi_remove(self, keys: Iterable[str]):
        """Remove several keys in one transaction."""
        await self._run(self._remove, list(keys))

    async def all_keys(self) -> list[str]:
        """List every stored key."""
        return await self._run(self._keys)
