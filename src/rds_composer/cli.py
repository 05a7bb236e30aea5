# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""CLI entry point for rds-composer.

Composition commands print the SQL a call would send, without touching a
database. ``query`` runs a statement against a configured database.

Commands:
    select: Compose a SELECT
    delete: Compose a DELETE
    update-rows: Compose a batched CASE/WHEN UPDATE
    lock: Compose LOCK TABLES
    query: Execute SQL against RDS_COMPOSER_DB (or --db) and print rows
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from .composer_config import ComposerConfig, config_from_env
from .sql import Operator, QueryResult, SqlDb

console = Console()


class DryRunOperator(Operator):
    """Operator whose delegate returns the SQL text instead of running it."""

    async def _query(self, sql: str) -> str:
        return sql


def _parse_json(value: str | None, param: str) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint=param) from e


def _parse_order(value: str) -> str | tuple[str, str]:
    """``name`` or ``name:desc``."""
    column, _, direction = value.partition(":")
    return (column, direction) if direction else column


def _parse_lock(value: str) -> dict[str, str | None]:
    """``table:type[:alias]``."""
    parts = value.split(":")
    if len(parts) < 2:
        raise click.BadParameter(f"expected TABLE:TYPE[:ALIAS], got '{value}'", param_hint="TABLES")
    return {
        "table_name": parts[0],
        "lock_type": parts[1],
        "table_alias": parts[2] if len(parts) > 2 else None,
    }


def _run(ctx: click.Context, coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except Exception as e:
        # configuration errors, bad connection strings and database errors
        console.print(f"[red]Error:[/red] {escape_markup(str(e))}", highlight=False)
        for note in getattr(e, "__notes__", ()):
            console.print(f"[dim]{escape_markup(note)}[/dim]", highlight=False)
        ctx.exit(1)


def _print_sql(sql: str) -> None:
    console.print(sql, markup=False, highlight=False, soft_wrap=True)


def _print_rows(result: Any) -> None:
    if isinstance(result, QueryResult):
        console.print(f"[green]{result.affected_rows} row(s) affected[/green]")
        return
    if not result:
        console.print("[dim]No rows.[/dim]")
        return

    table = Table()
    for column in result[0]:
        table.add_column(str(column), style="cyan")
    for row in result:
        table.add_row(*("NULL" if v is None else str(v) for v in row.values()))
    console.print(table)


# ============================================================================
# CLI Commands
# ============================================================================


@click.group()
@click.version_option(package_name="rds-composer")
@click.option("--time-zone", default=None, help="Zone for datetime literals: local, Z or +HH:MM.")
@click.option("--log-level", default=None, help="Logging level (DEBUG shows every statement).")
@click.pass_context
def main(ctx: click.Context, time_zone: str | None, log_level: str | None) -> None:
    """rds-composer - injection-safe SQL statement composer."""
    config = config_from_env()
    if time_zone:
        config.time_zone = time_zone
    if log_level:
        config.log_level = log_level
    config.configure_logging()
    ctx.obj = config


@main.command("select")
@click.argument("table")
@click.option("--columns", default=None, help="Comma-separated column list (default: *).")
@click.option("--where", default=None, help='JSON object, e.g. \'{"id": [1, 2]}\'.')
@click.option("--order", "orders", multiple=True, help="Column or column:asc|desc, repeatable.")
@click.option("--limit", type=int, default=None)
@click.option("--offset", type=int, default=None)
@click.pass_context
def select_cmd(
    ctx: click.Context,
    table: str,
    columns: str | None,
    where: str | None,
    orders: tuple[str, ...],
    limit: int | None,
    offset: int | None,
) -> None:
    """Print the SELECT statement for TABLE."""
    op = DryRunOperator(time_zone=ctx.obj.time_zone)
    sql = _run(
        ctx,
        op.select(
            table,
            columns=columns.split(",") if columns else None,
            where=_parse_json(where, "--where"),
            orders=[_parse_order(o) for o in orders],
            limit=limit,
            offset=offset,
        ),
    )
    _print_sql(sql)


@main.command("delete")
@click.argument("table")
@click.option("--where", default=None, help="JSON object; omitting it targets every row.")
@click.pass_context
def delete_cmd(ctx: click.Context, table: str, where: str | None) -> None:
    """Print the DELETE statement for TABLE."""
    op = DryRunOperator(time_zone=ctx.obj.time_zone)
    sql = _run(ctx, op.delete(table, _parse_json(where, "--where")))
    if not where:
        console.print("[yellow]Warning: no WHERE clause, every row would be deleted[/yellow]")
    _print_sql(sql)


@main.command("update-rows")
@click.argument("table")
@click.argument("rows")
@click.pass_context
def update_rows_cmd(ctx: click.Context, table: str, rows: str) -> None:
    """Print the batched UPDATE for TABLE.

    ROWS is a JSON list of {"id": ..., ...} or {"row": {...}, "where": {...}}.
    """
    op = DryRunOperator(time_zone=ctx.obj.time_zone)
    sql = _run(ctx, op.update_rows(table, _parse_json(rows, "ROWS")))
    _print_sql(sql)


@main.command("lock")
@click.argument("tables", nargs=-1)
@click.pass_context
def lock_cmd(ctx: click.Context, tables: tuple[str, ...]) -> None:
    """Print LOCK TABLES for TABLE:TYPE[:ALIAS] entries."""
    op = DryRunOperator(time_zone=ctx.obj.time_zone)
    sql = _run(ctx, op.locks([_parse_lock(t) for t in tables]))
    _print_sql(sql)


@main.command("query")
@click.argument("sql")
@click.option("--db", "db_url", default=None, help="Connection string (default: RDS_COMPOSER_DB).")
@click.pass_context
def query_cmd(ctx: click.Context, sql: str, db_url: str | None) -> None:
    """Execute SQL and print the resulting rows."""
    config: ComposerConfig = ctx.obj
    db_url = db_url or config.db_url
    if not db_url:
        console.print("[red]Error:[/red] no database configured (use --db or RDS_COMPOSER_DB)")
        ctx.exit(1)

    async def run() -> Any:
        db = SqlDb(db_url, time_zone=config.time_zone)
        try:
            return await db.query(sql)
        finally:
            await db.shutdown()

    _print_rows(_run(ctx, run()))


if __name__ == "__main__":
    main()
