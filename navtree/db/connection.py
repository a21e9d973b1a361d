"""SQLite access for tree snapshots: one JSON document per key."""

import aiosqlite

from navtree.db.schema import SCHEMA_SQL
from navtree.models import utc_now

_UPSERT_SQL = """
INSERT INTO snapshots (key, document, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET
    document = excluded.document,
    updated_at = excluded.updated_at
"""


class Database:
    """Async snapshot table over one aiosqlite connection.

    Errors from aiosqlite propagate; callers translate them.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    @classmethod
    async def connect(cls, path: str = "navtree.db") -> "Database":
        """Open ``path`` in WAL mode and make sure the snapshots table exists."""
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA busy_timeout=5000")
        await conn.executescript(SCHEMA_SQL)
        await conn.commit()
        return cls(conn)

    async def read_snapshot(self, key: str) -> str | None:
        """The raw document stored under ``key``, or None."""
        async with self._conn.execute(
            "SELECT document FROM snapshots WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
        return row["document"] if row else None

    async def write_snapshot(self, key: str, document: str) -> None:
        """Insert or replace the document under ``key`` in one committed statement."""
        await self._conn.execute(_UPSERT_SQL, (key, document, utc_now()))
        await self._conn.commit()

    async def snapshot_keys(self) -> list[str]:
        async with self._conn.execute("SELECT key FROM snapshots ORDER BY key") as cursor:
            rows = await cursor.fetchall()
        return [row["key"] for row in rows]

    async def close(self) -> None:
        await self._conn.close()
