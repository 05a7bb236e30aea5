# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite async adapter using aiosqlite with per-request connections."""

from __future__ import annotations

from typing import Any

import aiosqlite

from .base import DbAdapter, QueryResult


class SqliteAdapter(DbAdapter):
    """SQLite async adapter with per-request connections.

    Each acquire() opens a new connection, release() closes it.

    SQLite understands the backtick identifiers, ``LIMIT offset, count``
    and ``X'..'`` literals the Operator produces. It has no ``LOCK TABLES``.
    String literals are standard SQL: a backslash is an ordinary character
    and quotes are doubled, so values are escaped that way.
    """

    backslash_escapes = False

    def __init__(self, db_path: str):
        self.db_path = db_path or ":memory:"

    async def acquire(self) -> aiosqlite.Connection:
        """Open new connection for request."""
        return await aiosqlite.connect(self.db_path)

    async def release(self, conn: aiosqlite.Connection) -> None:
        """Close connection."""
        await conn.close()

    async def shutdown(self) -> None:
        """No-op for SQLite (no pool to close)."""
        pass

    async def commit(self, conn: aiosqlite.Connection) -> None:
        """Commit transaction on connection."""
        await conn.commit()

    async def rollback(self, conn: aiosqlite.Connection) -> None:
        """Rollback transaction on connection."""
        await conn.rollback()

    async def execute(
        self, conn: aiosqlite.Connection, sql: str
    ) -> list[dict[str, Any]] | QueryResult:
        """Execute statement, return rows as dicts or the affected row count."""
        async with conn.execute(sql) as cursor:
            if cursor.description is None:
                return QueryResult(cursor.rowcount, cursor.lastrowid)
            rows = await cursor.fetchall()
            cols = [c[0] for c in cursor.description]
            return [dict(zip(cols, row, strict=True)) for row in rows]
