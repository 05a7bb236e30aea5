# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MySQL-flavoured escaping of identifiers and values.

This module is the only place where caller data becomes SQL text. Every
identifier goes through escape_id() and every value through escape();
the formatter and the statement composer never concatenate raw input.

Value dispatch is closed: classify() maps any Python object to one
ValueKind and escape() has exactly one branch per kind.

String literals use MySQL backslash escapes by default. With
``backslash_escapes=False`` quotes are doubled and nothing else is
touched, which is how SQLite and MySQL's NO_BACKSLASH_ESCAPES mode read
string literals.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any

_ID_GLOBAL = re.compile(r"`")
_QUAL_GLOBAL = re.compile(r"\.")
_CHARS_GLOBAL = re.compile(r"[\0\b\t\n\r\x1a\"'\\]")
_TZ_OFFSET = re.compile(r"^([+\-\s])(\d\d):?(\d\d)?$")

_CHARS_ESCAPE_MAP = {
    "\0": "\\0",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
    '"': '\\"',
    "'": "\\'",
    "\\": "\\\\",
}


class ValueKind(Enum):
    """Closed set of value shapes understood by escape()."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE = "date"
    BINARY = "binary"
    STRING = "string"
    ARRAY = "array"
    RAW = "raw"
    OBJECT = "object"


def classify(value: Any) -> ValueKind:
    """Return the ValueKind escape() uses for ``value``.

    Order matters: bool is checked before numbers (bool is an int subclass)
    and objects exposing ``to_sql_string`` win over mapping/str handling.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, date):
        return ValueKind.DATE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if callable(getattr(value, "to_sql_string", None)):
        return ValueKind.RAW
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    return ValueKind.STRING


def escape_id(value: Any, forbid_qualified: bool = False) -> str:
    """Quote a table/column name with backticks.

    Embedded backticks are doubled. Unless ``forbid_qualified`` is set,
    a dotted name is split into one quoted part per segment; with it set
    the dot stays inside a single identifier. A list/tuple of names is escaped
    element-wise and joined with ``, ``.
    """
    if isinstance(value, (list, tuple)):
        return ", ".join(escape_id(item, forbid_qualified) for item in value)

    quoted = _ID_GLOBAL.sub("``", str(value))
    if forbid_qualified:
        return f"`{quoted}`"
    return "`" + _QUAL_GLOBAL.sub("`.`", quoted) + "`"


def escape(
    value: Any,
    stringify_objects: bool = False,
    time_zone: str = "local",
    backslash_escapes: bool = True,
) -> str:
    """Render ``value`` as a SQL literal."""
    kind = classify(value)

    if kind is ValueKind.NULL:
        return "NULL"
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return _number_to_string(value)
    if kind is ValueKind.DATE:
        return date_to_string(value, time_zone, backslash_escapes)
    if kind is ValueKind.BINARY:
        return buffer_to_string(value)
    if kind is ValueKind.ARRAY:
        return array_to_list(value, time_zone, backslash_escapes)
    if kind is ValueKind.RAW:
        return str(value.to_sql_string())
    if kind is ValueKind.OBJECT:
        if stringify_objects:
            return escape_string(str(value), backslash_escapes)
        return object_to_values(value, time_zone, backslash_escapes)
    return escape_string(value if isinstance(value, str) else str(value), backslash_escapes)


def escape_string(value: str, backslash_escapes: bool = True) -> str:
    """Single-quote ``value``.

    With ``backslash_escapes`` the control characters, quotes and backslash
    get a backslash prefix; without it only ``'`` is doubled.
    """
    if not backslash_escapes:
        return "'" + value.replace("'", "''") + "'"
    return "'" + _CHARS_GLOBAL.sub(lambda m: _CHARS_ESCAPE_MAP[m.group(0)], value) + "'"


def array_to_list(
    values: list[Any] | tuple[Any, ...],
    time_zone: str = "local",
    backslash_escapes: bool = True,
) -> str:
    """Comma-join escaped elements; nested sequences become ``(...)`` tuples."""
    parts = []
    for item in values:
        if isinstance(item, (list, tuple)):
            parts.append(f"({array_to_list(item, time_zone, backslash_escapes)})")
        else:
            parts.append(escape(item, True, time_zone, backslash_escapes))
    return ", ".join(parts)


def buffer_to_string(value: bytes | bytearray | memoryview) -> str:
    """Hex literal form: ``X'0aff'``."""
    return f"X'{bytes(value).hex()}'"


def object_to_values(
    value: Mapping[str, Any],
    time_zone: str = "local",
    backslash_escapes: bool = True,
) -> str:
    """Render a mapping as a SET-style list of column = value pairs."""
    parts = []
    for key, item in value.items():
        if callable(item):
            continue
        parts.append(f"{escape_id(key)} = {escape(item, True, time_zone, backslash_escapes)}")
    return ", ".join(parts)


def date_to_string(value: date, time_zone: str = "local", backslash_escapes: bool = True) -> str:
    """Quoted ``'YYYY-MM-DD HH:MM:SS.mmm'`` literal adjusted to ``time_zone``.

    ``"local"`` renders local wall-clock time. ``"Z"`` or an offset such
    as ``"+08:00"``, ``"+0800"`` or ``"+08"`` converts to that offset; naive
    datetimes are taken as local time. Any other zone renders UTC. Plain
    dates carry no time component and render as ``'YYYY-MM-DD'``.
    """
    if not isinstance(value, datetime):
        return escape_string(value.isoformat(), backslash_escapes)

    if time_zone == "local":
        if value.tzinfo is not None:
            value = value.astimezone()
    else:
        value = value.astimezone(_convert_timezone(time_zone))

    text = f"{value:%Y-%m-%d %H:%M:%S}.{value.microsecond // 1000:03d}"
    return escape_string(text, backslash_escapes)


def _convert_timezone(time_zone: str) -> tzinfo:
    match = _TZ_OFFSET.match(time_zone or "")
    if match is None:
        return timezone.utc
    # a space is a "+" lost to URL decoding
    sign = -1 if match.group(1) == "-" else 1
    offset = timedelta(hours=int(match.group(2)), minutes=int(match.group(3) or 0))
    return timezone(sign * offset)


def _number_to_string(value: int | float | Decimal) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        return "NULL"
    if isinstance(value, Decimal) and not value.is_finite():
        return "NULL"
    return str(value)


__all__ = [
    "ValueKind",
    "array_to_list",
    "buffer_to_string",
    "classify",
    "date_to_string",
    "escape",
    "escape_id",
    "escape_string",
    "object_to_values",
]
