# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Fixtures for composer tests.

RecordingOperator is a test-double execution delegate: it records every
SQL string it receives and returns canned rows. sqlite_db is a real
SqlDb backed by a temporary SQLite file with a small ``users`` table.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio

from rds_composer.sql import Operator, SqlDb


class RecordingOperator(Operator):
    """Operator that records SQL instead of executing it."""

    def __init__(self, rows: Any = None, time_zone: str = "local"):
        super().__init__(time_zone=time_zone)
        self.rows = rows if rows is not None else []
        self.sqls: list[str] = []

    async def _query(self, sql: str) -> Any:
        self.sqls.append(sql)
        return self.rows

    @property
    def last_sql(self) -> str:
        return self.sqls[-1]


@pytest.fixture
def op() -> RecordingOperator:
    """Recording operator returning no rows."""
    return RecordingOperator()


@pytest_asyncio.fixture
async def sqlite_db() -> AsyncGenerator[SqlDb, None]:
    """Create a SQLite database with a ``users`` table.

    Statements outside ``db.connection()`` run on one-shot connections,
    so the file database keeps data between calls.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, "test.db")
        db = SqlDb(db_path)
        await db.query(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER, email TEXT)"
        )
        yield db
        await db.shutdown()


@pytest.fixture
def make_op() -> type[RecordingOperator]:
    """Factory for recording operators with canned rows or a time zone."""
    return RecordingOperator
