# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base adapter class for async database backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a statement that returns no rows (INSERT, UPDATE, LOCK...)."""

    affected_rows: int
    insert_id: int | None = None


class DbAdapter(ABC):
    """Abstract base class for async database adapters.

    An adapter knows how to open connections and run one finished SQL
    string on them. It never builds SQL: statements arrive fully escaped
    from the Operator.

    Connection model:
    - acquire(): Returns a new connection
    - release(conn): Closes the connection
    - shutdown(): Releases adapter-wide resources (application shutdown only)

    Connections support commit/rollback for transaction control.
    SqlDb manages connection lifecycle via contextvars for per-task isolation.

    Attributes:
        backslash_escapes: Whether the backend reads backslash escapes inside
            string literals. SqlDb escapes values accordingly.
    """

    backslash_escapes = True

    @abstractmethod
    async def acquire(self) -> Any:
        """Open a new connection."""
        ...

    @abstractmethod
    async def release(self, conn: Any) -> None:
        """Close a connection."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Release adapter-wide resources (application shutdown)."""
        ...

    @abstractmethod
    async def execute(self, conn: Any, sql: str) -> list[dict[str, Any]] | QueryResult:
        """Run ``sql`` on ``conn``.

        Returns:
            Rows as dicts when the statement yields a result set,
            otherwise a QueryResult with the affected row count.
        """
        ...

    @abstractmethod
    async def commit(self, conn: Any) -> None:
        """Commit transaction on connection."""
        ...

    @abstractmethod
    async def rollback(self, conn: Any) -> None:
        """Rollback transaction on connection."""
        ...
