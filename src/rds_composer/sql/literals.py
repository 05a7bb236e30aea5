# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQL fragments that are emitted verbatim instead of being escaped."""

from __future__ import annotations


class Literal:
    """Raw SQL text, e.g. a function call used as a column value.

    Anything with a ``to_sql_string()`` method is written into the
    statement as-is, so only build these from trusted text.
    """

    def __init__(self, text: str):
        self.text = text

    def to_sql_string(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Literal({self.text!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Literal) and other.text == self.text

    def __hash__(self) -> int:
        return hash(self.text)


now = Literal("now()")

__all__ = ["Literal", "now"]
