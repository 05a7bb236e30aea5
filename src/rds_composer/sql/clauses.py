# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""WHERE / ORDER BY / LIMIT fragments and the LOCK TABLES grammar.

Every builder returns either an empty string or a fragment starting with a
space, so clauses compose by concatenation in the fixed order
WHERE -> ORDER BY -> LIMIT.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import ConfigurationError
from .escape import escape_id
from .formatter import format_sql

LOCK_TYPES = frozenset({"READ", "WRITE", "READ LOCAL", "LOW_PRIORITY WRITE"})


@dataclass(frozen=True)
class LockRequest:
    """One ``tbl_name [AS alias] lock_type`` entry of LOCK TABLES."""

    table_name: str
    lock_type: str
    table_alias: str | None = None


def build_where(
    where: Mapping[str, Any] | None,
    time_zone: str = "local",
    backslash_escapes: bool = True,
) -> str:
    """Build `` WHERE ...`` from a column -> condition mapping.

    list/tuple -> ``IN (...)``, None -> ``IS NULL``, anything else -> ``=``.
    An empty or missing mapping yields no clause at all.
    """
    if not where:
        return ""

    parts = []
    values: list[Any] = []
    for column, value in where.items():
        if isinstance(value, (list, tuple)):
            parts.append("?? IN (?)")
        elif value is None:
            parts.append("?? IS ?")
        else:
            parts.append("?? = ?")
        values.append(column)
        values.append(value)
    return format_sql(
        " WHERE " + " AND ".join(parts),
        values,
        time_zone=time_zone,
        backslash_escapes=backslash_escapes,
    )


def build_order_by(orders: str | Sequence[Any] | None) -> str:
    """Build `` ORDER BY ...``.

    ``orders`` is a column name or a sequence of column names and
    ``(column[, direction])`` pairs. Directions other than ASC/DESC
    (any case) are dropped.
    """
    if not orders:
        return ""
    if isinstance(orders, str):
        orders = [orders]

    parts = []
    for order in orders:
        if isinstance(order, str):
            parts.append(escape_id(order))
        elif isinstance(order, (list, tuple)) and order:
            direction = str(order[1]).upper() if len(order) > 1 else ""
            if direction in ("ASC", "DESC"):
                parts.append(f"{escape_id(order[0])} {direction}")
            else:
                parts.append(escape_id(order[0]))
    if not parts:
        return ""
    return " ORDER BY " + ", ".join(parts)


def build_limit(limit: Any = None, offset: Any = None) -> str:
    """Build `` LIMIT offset, limit``; no clause without a positive numeric limit."""
    if not _is_number(limit) or not limit:
        return ""
    if not _is_number(offset):
        offset = 0
    return f" LIMIT {offset}, {limit}"


def build_lock_statement(tables: Sequence[LockRequest | Mapping[str, Any]]) -> str:
    """Build ``LOCK TABLES ...;`` for one or more tables.

    Entries are LockRequest instances or mappings with ``table_name``,
    ``lock_type`` and optional ``table_alias``. Lock types are matched
    case-insensitively and written in upper case.

    Raises:
        ConfigurationError: empty list, missing name or type, unknown type.
    """
    if not tables:
        raise ConfigurationError("Cannot lock empty tables.")

    entries = []
    for table in tables:
        request = _lock_request(table)
        if not request.table_name:
            raise ConfigurationError("No table_name provided while trying to lock table")
        if not request.lock_type:
            raise ConfigurationError(
                f"No lock_type provided while trying to lock table `{request.table_name}`"
            )
        lock_type = request.lock_type.upper()
        if lock_type not in LOCK_TYPES:
            raise ConfigurationError(
                f"lock_type provided while trying to lock table `{request.table_name}` "
                "must be one of the following (case insensitive): "
                "`READ` | `WRITE` | `READ LOCAL` | `LOW_PRIORITY WRITE`"
            )

        entry = escape_id(request.table_name) + " "
        if request.table_alias:
            entry += f" AS {escape_id(request.table_alias)} "
        entries.append(f"{entry} {lock_type}")
    return "LOCK TABLES " + ", ".join(entries) + ";"


def _lock_request(table: LockRequest | Mapping[str, Any]) -> LockRequest:
    if isinstance(table, LockRequest):
        return table
    if not isinstance(table, Mapping):
        raise ConfigurationError(f"Invalid table lock description: {table!r}")
    return LockRequest(
        table_name=table.get("table_name"),
        lock_type=table.get("lock_type"),
        table_alias=table.get("table_alias"),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


__all__ = [
    "LOCK_TYPES",
    "LockRequest",
    "build_limit",
    "build_lock_statement",
    "build_order_by",
    "build_where",
]
