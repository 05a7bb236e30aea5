# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Placeholder expansion for SQL templates.

Two mutually exclusive modes, chosen by the shape of ``values``:

- Named: ``values`` is a mapping. Every ``:word`` whose key is present is
  replaced by the escaped value; unknown keys are left untouched so the
  same template can be filled in several passes. Note that this also means
  a misspelled key silently survives into the SQL text.
- Positional: anything else. ``??`` takes the next value as identifier(s),
  ``?`` as a value, strictly left to right. Once values run out the
  remaining placeholders stay as literal text; extra values are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .escape import escape, escape_id

_NAMED = re.compile(r":(\w+)")
_POSITIONAL = re.compile(r"\?+")


def format_sql(
    sql: str,
    values: Any = None,
    stringify_objects: bool = False,
    time_zone: str = "local",
    backslash_escapes: bool = True,
) -> str:
    """Expand placeholders in ``sql`` against ``values``."""
    if isinstance(values, Mapping):
        return _format_named(sql, values, stringify_objects, time_zone, backslash_escapes)
    if values is None:
        return sql
    if not isinstance(values, (list, tuple)):
        values = [values]
    return _format_positional(sql, values, stringify_objects, time_zone, backslash_escapes)


def _format_named(
    sql: str,
    values: Mapping[str, Any],
    stringify_objects: bool,
    time_zone: str,
    backslash_escapes: bool,
) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in values:
            return escape(values[key], stringify_objects, time_zone, backslash_escapes)
        return match.group(0)

    return _NAMED.sub(replace, sql)


def _format_positional(
    sql: str,
    values: list[Any] | tuple[Any, ...],
    stringify_objects: bool,
    time_zone: str,
    backslash_escapes: bool,
) -> str:
    index = 0

    def replace(match: re.Match[str]) -> str:
        nonlocal index
        placeholder = match.group(0)
        if len(placeholder) > 2 or index >= len(values):
            return placeholder
        value = values[index]
        index += 1
        if len(placeholder) == 2:
            return escape_id(value)
        return escape(value, stringify_objects, time_zone, backslash_escapes)

    return _POSITIONAL.sub(replace, sql)


__all__ = ["format_sql"]
