"""SQLite snapshot backend.

Stores snapshot blobs in a single table so a saved workflow survives process
restarts.
"""

from pathlib import Path
from typing import List, Optional

import aiosqlite

from flowbridge.utils.config import get_sqlite_path


class SQLiteBackend:
    """SQLite-based snapshot storage.

    The database schema:
    - key: TEXT PRIMARY KEY
    - snapshot: TEXT (serialized graph)
    - created_at: TIMESTAMP
    - updated_at: TIMESTAMP
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize SQLite backend.

        Args:
            db_path: Path to the database file (``FLOWBRIDGE_DB_PATH`` if omitted)
        """
        self.db_path = db_path or get_sqlite_path()
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        db_dir = Path(self.db_path).parent
        if not db_dir.exists():
            db_dir.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS workflow_snapshots (
                    key TEXT PRIMARY KEY,
                    snapshot TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            await db.commit()

        self._initialized = True

    async def save(self, key: str, blob: str) -> None:
        """Insert or overwrite the snapshot stored under ``key``."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO workflow_snapshots (key, snapshot, created_at, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                ON CONFLICT(key)
                DO UPDATE SET
                    snapshot = excluded.snapshot,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, blob),
            )
            await db.commit()

    async def load(self, key: str) -> Optional[str]:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT snapshot FROM workflow_snapshots WHERE key = ?",
                (key,),
            ) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def delete(self, key: str) -> None:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM workflow_snapshots WHERE key = ?", (key,))
            await db.commit()

    async def exists(self, key: str) -> bool:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT 1 FROM workflow_snapshots WHERE key = ? LIMIT 1",
                (key,),
            ) as cursor:
                return await cursor.fetchone() is not None

    async def list_keys(self) -> List[str]:
        """Stored keys, most recently updated first."""
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT key FROM workflow_snapshots ORDER BY updated_at DESC, key"
            ) as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    def __repr__(self) -> str:
        return f"SQLiteBackend(db_path='{self.db_path}')"
