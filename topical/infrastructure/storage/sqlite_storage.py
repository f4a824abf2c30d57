"""
SQLite-backed storage for conversation topic tables.

One row per conversation key, the table serialized as JSON. Calls run in a
worker thread so a turn never blocks the event loop on disk I/O.
"""

from typing import Dict, Any, Optional
from pathlib import Path
import asyncio
import json
import sqlite3
import time

import structlog

logger = structlog.get_logger(__name__)


class SqliteStorage:
    """SQLite-backed key-value store for topic tables."""

    def __init__(self, db_path: str | Path = "topical.db"):
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        if self.db_path != ":memory:":
            self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA busy_timeout=5000")
        self._lock = asyncio.Lock()
        self._create_tables()

    def _create_tables(self):
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS conversations (
                storage_key TEXT PRIMARY KEY,
                document TEXT NOT NULL,
                updated_at REAL NOT NULL
            );
        """)
        self.conn.commit()

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        row = self.conn.execute(
            "SELECT document FROM conversations WHERE storage_key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["document"])

    def _write(self, key: str, data: Dict[str, Any]) -> None:
        self.conn.execute(
            """INSERT INTO conversations (storage_key, document, updated_at)
               VALUES (?, ?, ?)
               ON CONFLICT(storage_key) DO UPDATE SET
                   document = excluded.document,
                   updated_at = excluded.updated_at""",
            (key, json.dumps(data), time.time()),
        )
        self.conn.commit()

    def _delete(self, key: str) -> bool:
        cursor = self.conn.execute(
            "DELETE FROM conversations WHERE storage_key = ?", (key,)
        )
        self.conn.commit()
        return cursor.rowcount > 0

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            return await asyncio.to_thread(self._read, key)

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, key, data)
        logger.debug("Conversation table written", storage_key=key)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return await asyncio.to_thread(self._delete, key)

    def close(self):
        self.conn.close()
