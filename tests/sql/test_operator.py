# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for sql.operator - statement composition over a recording delegate."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rds_composer.sql import ConfigurationError, Operator


class TestQuery:
    """Tests for query/query_one and delegate error handling."""

    async def test_query_without_values_passes_sql(self, op):
        await op.query("SELECT 1")
        assert op.sqls == ["SELECT 1"]

    async def test_query_positional_values(self, op):
        await op.query("SELECT * FROM ?? WHERE id = ?", ["users", 1])
        assert op.last_sql == "SELECT * FROM `users` WHERE id = 1"

    async def test_query_named_values(self, op):
        await op.query("SELECT * FROM users WHERE id = :id AND x = :x", {"id": 2})
        assert op.last_sql == "SELECT * FROM users WHERE id = 2 AND x = :x"

    async def test_query_one(self, make_op):
        op = make_op(rows=[{"id": 1}, {"id": 2}])
        assert await op.query_one("SELECT 1") == {"id": 1}

    async def test_query_one_empty(self, op):
        assert await op.query_one("SELECT 1") is None

    async def test_base_delegate_fails(self):
        """Operator without a transport raises, with the SQL attached."""
        with pytest.raises(NotImplementedError) as exc_info:
            await Operator().query("SELECT 1")
        assert "sql: SELECT 1" in exc_info.value.__notes__

    async def test_delegate_error_propagates_with_sql(self):
        calls = []

        class FailingOperator(Operator):
            async def _query(self, sql):
                calls.append(sql)
                raise RuntimeError("connection lost")

        with pytest.raises(RuntimeError, match="connection lost") as exc_info:
            await FailingOperator().delete("users", {"id": 1})
        assert exc_info.value.__notes__ == ["sql: DELETE FROM `users` WHERE `id` = 1"]
        assert len(calls) == 1  # no retry

    def test_escape_helpers(self):
        op = Operator(time_zone="Z")
        assert op.escape_id("a.b") == "`a`.`b`"
        assert op.escape("x") == "'x'"
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert op.escape(value) == "'2024-01-01 00:00:00.000'"
        assert op.format("?? = ?", ["a", 1]) == "`a` = 1"

    def test_literals_exposed(self):
        assert Operator.literals.now.to_sql_string() == "now()"


class TestCount:
    """Tests for count."""

    async def test_count(self, make_op):
        op = make_op(rows=[{"count": 3}])
        assert await op.count("users", {"age": 30}) == 3
        assert op.last_sql == "SELECT COUNT(*) AS count FROM `users` WHERE `age` = 30"

    async def test_count_without_where(self, make_op):
        op = make_op(rows=[{"count": 0}])
        assert await op.count("users") == 0
        assert op.last_sql == "SELECT COUNT(*) AS count FROM `users`"


class TestSelect:
    """Tests for select and get."""

    async def test_select_all(self, op):
        await op.select("users")
        assert op.last_sql == "SELECT * FROM `users`"

    async def test_select_star_explicit(self, op):
        await op.select("users", columns="*")
        assert op.last_sql == "SELECT * FROM `users`"

    async def test_select_full(self, op):
        await op.select(
            "users",
            columns=["id", "name"],
            where={"status": ["a", "b"], "deleted_at": None},
            orders=[("id", "desc"), "name"],
            limit=10,
            offset=20,
        )
        assert op.last_sql == (
            "SELECT `id`, `name` FROM `users` WHERE `status` IN ('a', 'b') AND `deleted_at` IS NULL"
            " ORDER BY `id` DESC, `name` LIMIT 20, 10"
        )

    async def test_select_single_column(self, op):
        await op.select("users", columns="name")
        assert op.last_sql == "SELECT `name` FROM `users`"

    async def test_select_returns_rows(self, make_op):
        op = make_op(rows=[{"id": 1}])
        assert await op.select("users") == [{"id": 1}]

    async def test_table_name_injection_escaped(self, op):
        await op.select("t`; DROP TABLE x; --")
        assert op.last_sql == "SELECT * FROM `t``; DROP TABLE x; --`"

    async def test_get(self, make_op):
        op = make_op(rows=[{"id": 1, "name": "a"}])
        assert await op.get("users", {"id": 1}) == {"id": 1, "name": "a"}
        assert op.last_sql == "SELECT * FROM `users` WHERE `id` = 1 LIMIT 0, 1"

    async def test_get_with_columns_and_orders(self, op):
        await op.get("users", {"age": 3}, columns=["name"], orders=[("id", "asc")])
        assert op.last_sql == "SELECT `name` FROM `users` WHERE `age` = 3 ORDER BY `id` ASC LIMIT 0, 1"

    async def test_get_missing(self, op):
        assert await op.get("users", {"id": 99}) is None


class TestInsert:
    """Tests for insert."""

    async def test_multiple_rows(self, op):
        await op.insert("t", [{"a": 1, "b": 2}, {"a": 3, "b": 4}])
        assert op.last_sql == "INSERT INTO `t`(`a`, `b`) VALUES (1, 2), (3, 4)"

    async def test_single_row(self, op):
        await op.insert("t", {"name": "x", "age": None})
        assert op.last_sql == "INSERT INTO `t`(`name`, `age`) VALUES ('x', NULL)"

    async def test_columns_from_first_row(self, op):
        await op.insert("t", [{"a": 1, "b": 2}, {"b": 4, "a": 3, "c": 5}, {"a": 6}])
        assert op.last_sql == "INSERT INTO `t`(`a`, `b`) VALUES (1, 2), (3, 4), (6, NULL)"

    async def test_explicit_columns(self, op):
        await op.insert("t", [{"a": 1, "b": 2}, {"a": 3, "b": 4}], columns=["b"])
        assert op.last_sql == "INSERT INTO `t`(`b`) VALUES (2), (4)"

    async def test_literal_value(self, op):
        await op.insert("t", {"id": 1, "created": op.literals.now})
        assert op.last_sql == "INSERT INTO `t`(`id`, `created`) VALUES (1, now())"

    async def test_question_mark_in_value(self, op):
        await op.insert("t", [{"q": "why?"}, {"q": "??"}])
        assert op.last_sql == "INSERT INTO `t`(`q`) VALUES ('why?'), ('??')"

    async def test_empty_rows_raises(self, op):
        with pytest.raises(ConfigurationError):
            await op.insert("t", [])
        assert op.sqls == []


class TestUpdate:
    """Tests for update."""

    async def test_default_where_on_id(self, op):
        await op.update("t", {"id": 7, "name": "x"})
        assert op.last_sql == "UPDATE `t` SET `id` = 7, `name` = 'x' WHERE `id` = 7"

    async def test_explicit_columns_and_where(self, op):
        await op.update("t", {"name": "x", "age": 3}, columns=["name"], where={"age": [1, 2]})
        assert op.last_sql == "UPDATE `t` SET `name` = 'x' WHERE `age` IN (1, 2)"

    async def test_missing_id_raises(self, op):
        with pytest.raises(ConfigurationError, match="update condition"):
            await op.update("t", {"name": "x"})
        assert op.sqls == []

    async def test_none_value(self, op):
        await op.update("t", {"id": 1, "email": None})
        assert op.last_sql == "UPDATE `t` SET `id` = 1, `email` = NULL WHERE `id` = 1"

    async def test_datetime_uses_operator_time_zone(self, make_op):
        op = make_op(time_zone="+02:00")
        value = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        await op.update("t", {"id": 1, "seen": value})
        assert op.last_sql == "UPDATE `t` SET `id` = 1, `seen` = '2024-05-01 12:00:00.000' WHERE `id` = 1"


class TestDelete:
    """Tests for delete."""

    async def test_delete_with_where(self, op):
        await op.delete("t", {"id": [1, 2]})
        assert op.last_sql == "DELETE FROM `t` WHERE `id` IN (1, 2)"

    async def test_delete_without_where_targets_all_rows(self, op):
        await op.delete("t")
        assert op.last_sql == "DELETE FROM `t`"


class TestStandardStringLiterals:
    """Operators with backslash_escapes off double quotes in every statement."""

    async def test_where_insert_and_update_rows(self, op):
        op.backslash_escapes = False
        await op.select("t", where={"name": "o'k"})
        assert op.last_sql == "SELECT * FROM `t` WHERE `name` = 'o''k'"

        await op.insert("t", {"name": "a\\b'"})
        assert op.last_sql == "INSERT INTO `t`(`name`) VALUES ('a\\b''')"

        await op.update_rows("t", [{"id": 1, "name": "x'"}])
        assert op.last_sql == (
            "UPDATE `t` SET `name` = CASE WHEN `id` = 1 THEN 'x''' ELSE `name` END "
            "WHERE `id` IN (1)"
        )

    def test_default_is_backslash_escapes(self, op):
        assert Operator.backslash_escapes is True
        assert op.escape("o'k") == "'o\\'k'"


class TestLocks:
    """Tests for locks, lock_one and unlock."""

    async def test_lock_one(self, op):
        await op.lock_one("posts", "read", "p")
        assert op.last_sql == "LOCK TABLES `posts`  AS `p`  READ;"

    async def test_lock_one_without_alias(self, op):
        await op.lock_one("posts", "write")
        assert op.last_sql == "LOCK TABLES `posts`  WRITE;"

    async def test_locks(self, op):
        await op.locks([
            {"table_name": "a", "lock_type": "READ"},
            {"table_name": "b", "lock_type": "write", "table_alias": "bb"},
        ])
        assert op.last_sql == "LOCK TABLES `a`  READ, `b`  AS `bb`  WRITE;"

    async def test_invalid_lock_not_sent(self, op):
        with pytest.raises(ConfigurationError):
            await op.lock_one("posts", "exclusive")
        with pytest.raises(ConfigurationError):
            await op.locks([])
        assert op.sqls == []

    async def test_unlock(self, op):
        await op.unlock()
        assert op.last_sql == "UNLOCK TABLES;"
