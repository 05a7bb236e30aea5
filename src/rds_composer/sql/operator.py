# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Statement composer: CRUD, batched CASE updates and table locks.

Operator turns structured calls into one finished SQL string and hands it
to ``_query()``, the execution delegate. The base class has no transport:
``_query()`` raises until a subclass (SqlDb, a test double) provides one.

Usage:
    class MyOperator(Operator):
        async def _query(self, sql):
            return await my_connection.fetch(sql)

    op = MyOperator()
    await op.insert("users", [{"name": "a"}, {"name": "b"}])
    await op.update_rows("users", [{"id": 1, "name": "x"}, {"id": 2, "name": "y"}])
    user = await op.get("users", {"id": 1})

Note:
    ``delete()`` without ``where`` deletes every row, and ``update_rows()``
    / ``update()`` only protect against a missing condition, not a too broad
    one. Guard these at the call site.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from . import literals
from .clauses import LockRequest, build_limit, build_lock_statement, build_order_by, build_where
from .errors import ConfigurationError
from .escape import escape, escape_id
from .formatter import format_sql

logger = logging.getLogger(__name__)


@dataclass
class CaseAssignment:
    """``WHEN ... THEN ...`` branches collected for one column of update_rows()."""

    column: str
    branches: list[str] = field(default_factory=list)

    def add(self, condition: str, literal: str) -> None:
        self.branches.append(f"WHEN {condition} THEN {literal}")

    def to_sql(self) -> str:
        column = escape_id(self.column)
        return f"{column} = CASE {' '.join(self.branches)} ELSE {column} END"


class Operator:
    """Composes SQL statements and forwards them to the execution delegate.

    Attributes:
        time_zone: Zone used to render datetime values ("local", "Z", "+HH:MM").
        backslash_escapes: Escape string literals MySQL-style. Subclasses
            talking to a database that reads standard SQL literals set it
            to False so quotes are doubled instead.
        literals: The literals module, so callers can write ``op.literals.now``.
    """

    literals = literals
    backslash_escapes = True

    def __init__(self, time_zone: str = "local"):
        self.time_zone = time_zone

    # -------------------------------------------------------------------------
    # Escaping
    # -------------------------------------------------------------------------

    def escape(self, value: Any, stringify_objects: bool = False, time_zone: str | None = None) -> str:
        """Escape a value as a SQL literal."""
        return escape(value, stringify_objects, time_zone or self.time_zone, self.backslash_escapes)

    def escape_id(self, value: Any, forbid_qualified: bool = False) -> str:
        """Escape a table/column name."""
        return escape_id(value, forbid_qualified)

    def format(
        self,
        sql: str,
        values: Any = None,
        stringify_objects: bool = False,
        time_zone: str | None = None,
    ) -> str:
        """Expand ``?``/``??`` (sequence) or ``:name`` (mapping) placeholders."""
        return format_sql(
            sql, values, stringify_objects, time_zone or self.time_zone, self.backslash_escapes
        )

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def query(self, sql: str, values: Any = None) -> Any:
        """Run ``sql`` (formatted with ``values`` if given) through the delegate.

        Failures from the delegate are re-raised unchanged, with the SQL text
        attached as an exception note.
        """
        if values is not None:
            sql = self.format(sql, values)
        logger.debug("query %r", sql)
        try:
            rows = await self._query(sql)
        except Exception as exc:
            exc.add_note(f"sql: {sql}")
            logger.debug("query error: %s", exc)
            raise
        if isinstance(rows, list):
            logger.debug("query got %d rows", len(rows))
        return rows

    async def query_one(self, sql: str, values: Any = None) -> Any:
        """Run ``sql`` and return the first row, or None."""
        rows = await self.query(sql, values)
        return rows[0] if rows else None

    async def _query(self, sql: str) -> Any:
        """Execute finished SQL text. Subclasses provide the transport."""
        raise NotImplementedError(f"{type(self).__name__} must implement _query()")

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    async def count(self, table: str, where: Mapping[str, Any] | None = None) -> int:
        """Return the number of rows matching ``where``."""
        sql = self.format("SELECT COUNT(*) AS count FROM ??", [table]) + self._where(where)
        logger.debug("count(%r, %r) => %r", table, where, sql)
        rows = await self.query(sql)
        return rows[0]["count"]

    async def select(
        self,
        table: str,
        columns: str | Sequence[str] | None = None,
        where: Mapping[str, Any] | None = None,
        orders: str | Sequence[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows from ``table``.

        Args:
            table: Table name.
            columns: Column name(s) to select; default ``*``.
            where: Column -> condition mapping.
            orders: Column name, or sequence of names / ``(name, "asc"|"desc")``.
            limit: Maximum number of rows; no limit when missing.
            offset: Rows to skip; only used together with ``limit``.
        """
        sql = (
            self._select_columns(table, columns)
            + self._where(where)
            + build_order_by(orders)
            + build_limit(limit, offset)
        )
        logger.debug("select(%r) => %r", table, sql)
        return await self.query(sql)

    async def get(
        self,
        table: str,
        where: Mapping[str, Any] | None = None,
        columns: str | Sequence[str] | None = None,
        orders: str | Sequence[Any] | None = None,
    ) -> dict[str, Any] | None:
        """Return the first matching row or None."""
        rows = await self.select(table, columns=columns, where=where, orders=orders, limit=1, offset=0)
        return rows[0] if rows else None

    async def insert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        columns: Sequence[str] | None = None,
    ) -> Any:
        """Insert one row (mapping) or many rows (sequence) in one statement.

        ``columns`` defaults to the keys of the first row; every row is
        written in that column order and missing keys become NULL.
        """
        if isinstance(rows, Mapping):
            rows = [rows]
        if not rows:
            raise ConfigurationError("Cannot insert empty rows")
        if columns is None:
            columns = list(rows[0].keys())

        params: list[Any] = [table, list(columns)]
        tuples = []
        for row in rows:
            params.append([row.get(column) for column in columns])
            tuples.append("(?)")

        sql = self.format("INSERT INTO ??(??) VALUES " + ", ".join(tuples), params)
        logger.debug("insert(%r, %d rows) => %r", table, len(rows), sql)
        return await self.query(sql)

    async def update(
        self,
        table: str,
        row: Mapping[str, Any],
        columns: Sequence[str] | None = None,
        where: Mapping[str, Any] | None = None,
    ) -> Any:
        """Update rows of ``table`` with the values of ``row``.

        Without ``where`` the condition is ``{"id": row["id"]}``.

        Raises:
            ConfigurationError: ``where`` is missing and ``row`` has no ``id``.
        """
        if columns is None:
            columns = list(row.keys())
        if where is None:
            if "id" not in row:
                raise ConfigurationError(
                    "Can not auto detect update condition, please set where, "
                    "or make sure row['id'] exists"
                )
            where = {"id": row["id"]}

        sets = []
        values: list[Any] = []
        for column in columns:
            sets.append("?? = ?")
            values.append(column)
            values.append(row.get(column))

        sql = (
            self.format("UPDATE ?? SET ", [table])
            + self.format(", ".join(sets), values)
            + self._where(where)
        )
        logger.debug("update(%r, %r) => %r", table, row, sql)
        return await self.query(sql)

    async def update_rows(self, table: str, options: Sequence[Mapping[str, Any]]) -> Any:
        """Update many rows with per-row values in a single statement.

        Each option is ``{"id": ..., **columns}`` or ``{"row": {...}, "where": {...}}``.
        Produces, for rows ``{"id": 1, "name": "a"}`` and ``{"id": 2, "name": "b"}``::

            UPDATE `t` SET `name` = CASE WHEN `id` = 1 THEN 'a'
                WHEN `id` = 2 THEN 'b' ELSE `name` END WHERE `id` IN (1, 2)

        The trailing WHERE collects the distinct values of every condition
        column across the batch, so only touched rows are scanned.

        Raises:
            ConfigurationError: ``options`` is not a list, or an option has
                neither ``id`` nor both ``row`` and ``where``.
        """
        if not isinstance(options, (list, tuple)):
            raise ConfigurationError("Options should be a list")

        cases: dict[str, CaseAssignment] = {}
        scope: dict[str, list[Any]] = {}

        for option in options:
            row, where = self._normalize_update_option(option)
            condition = self._where(where)[len(" WHERE "):]

            for column, value in row.items():
                if column not in cases:
                    cases[column] = CaseAssignment(column)
                cases[column].add(condition, self.escape(value))

            for column, value in where.items():
                seen = scope.setdefault(column, [])
                for item in value if isinstance(value, (list, tuple)) else [value]:
                    if item not in seen:
                        seen.append(item)

        if not cases:
            raise ConfigurationError("update_rows needs at least one column to update")

        sql = (
            self.format("UPDATE ?? SET ", [table])
            + ", ".join(case.to_sql() for case in cases.values())
            + self._where(scope)
        )
        logger.debug("update_rows(%r, %d rows) => %r", table, len(options), sql)
        return await self.query(sql)

    async def delete(self, table: str, where: Mapping[str, Any] | None = None) -> Any:
        """Delete rows matching ``where``. Without ``where`` the table is emptied."""
        sql = self.format("DELETE FROM ??", [table]) + self._where(where)
        logger.debug("delete(%r, %r) => %r", table, where, sql)
        return await self.query(sql)

    # -------------------------------------------------------------------------
    # Table locks
    # -------------------------------------------------------------------------

    async def locks(self, tables: Sequence[LockRequest | Mapping[str, Any]]) -> Any:
        """Lock several tables in the current session.

        Example:
            await op.locks([{"table_name": "posts", "lock_type": "READ", "table_alias": "t"}])
        """
        sql = build_lock_statement(tables)
        logger.debug("lock tables => %r", sql)
        return await self.query(sql)

    async def lock_one(self, table_name: str, lock_type: str, table_alias: str | None = None) -> Any:
        """Lock a single table, e.g. ``await op.lock_one("posts", "READ", "t")``."""
        sql = build_lock_statement([LockRequest(table_name, lock_type, table_alias)])
        logger.debug("lock one table => %r", sql)
        return await self.query(sql)

    async def unlock(self) -> Any:
        """Release every table lock held by the current session."""
        logger.debug("unlock tables")
        return await self.query("UNLOCK TABLES;")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _where(self, where: Mapping[str, Any] | None) -> str:
        return build_where(where, self.time_zone, self.backslash_escapes)

    def _select_columns(self, table: str, columns: str | Sequence[str] | None) -> str:
        if not columns or columns == "*":
            return self.format("SELECT * FROM ??", [table])
        return self.format("SELECT ?? FROM ??", [columns, table])

    @staticmethod
    def _normalize_update_option(option: Mapping[str, Any]) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
        if isinstance(option, Mapping):
            if "id" in option:
                row = {key: value for key, value in option.items() if key != "id"}
                return row, {"id": option["id"]}
            if option.get("row") and option.get("where"):
                return option["row"], option["where"]
        raise ConfigurationError(
            "Can not auto detect update_rows condition, please set option['row'] "
            "and option['where'], or make sure option['id'] exists"
        )


__all__ = ["CaseAssignment", "Operator"]
