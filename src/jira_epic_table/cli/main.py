"""
Typer application for running ``jira_epic`` queries from a shell.

The CLI plays the role of a minimal host: it loads secrets, builds the
execution context and table registry once in the callback, and prints each
row as one JSON document per line.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer

from ..adapters import AdapterError
from ..core import ExecutionContext, QueryPlanError, TableRegistry, configure_logging, execute
from ..plugin import build_registry

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Query Jira epics as table rows.\n\n"
        "Commands:\n"
        "- tables: list the tables served by the plugin.\n"
        "- describe: show columns and key columns of a table.\n"
        "- query: fetch rows, optionally filtered with --where column=value."
    ),
)


def _parse_where(values: Optional[List[str]]) -> Dict[str, str]:
    quals: Dict[str, str] = {}
    if not values:
        return quals
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"Invalid qualifier '{item}'. Use column=value.")
        name, value = item.split("=", 1)
        name = name.strip()
        if not name:
            raise typer.BadParameter(f"Invalid qualifier '{item}'. Column name is empty.")
        quals[name] = value
    return quals


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    secrets_file: Optional[Path] = typer.Option(
        None,
        "--secrets",
        help="Path to a secrets TOML file with a [jira] section. Defaults to .secrets/secret.toml discovery.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG or INFO."),
) -> None:
    """
    Configure logging, the execution context and the table registry.

    Both are stored in Typer's state so child commands can retrieve them via
    :class:`typer.Context`.
    """

    configure_logging(log_level, force=log_level is not None)
    try:
        context = ExecutionContext.build_default(secrets_path=secrets_file)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    state = ctx.ensure_object(dict)
    state["registry"] = build_registry()
    state["context"] = context


def _require_registry(ctx: typer.Context) -> TableRegistry:
    state = ctx.ensure_object(dict)
    registry = state.get("registry")
    if not isinstance(registry, TableRegistry):
        raise typer.Exit(code=2)
    return registry


def _require_context(ctx: typer.Context) -> ExecutionContext:
    state = ctx.ensure_object(dict)
    context = state.get("context")
    if not isinstance(context, ExecutionContext):
        raise typer.Exit(code=2)
    return context


@app.command("tables")
def tables(ctx: typer.Context) -> None:
    """List registered tables."""

    registry = _require_registry(ctx)
    header = f"{'Table':<16} Description"
    typer.echo(header)
    typer.echo("-" * len(header))
    for table in registry.list():
        typer.echo(f"{table.name:<16} {table.description}")


@app.command("describe")
def describe(
    ctx: typer.Context,
    table_name: str = typer.Argument(..., help="Name of the table."),
    output_json: bool = typer.Option(False, "--json", help="Emit the declaration in JSON format."),
) -> None:
    """Show columns and key columns of a table."""

    registry = _require_registry(ctx)
    table = registry.get(table_name)
    if table is None:
        typer.echo(f"Table '{table_name}' is not registered.", err=True)
        raise typer.Exit(code=1)

    if output_json:
        typer.echo(table.to_json())
        return

    typer.echo(f"{table.name}: {table.description}")
    for column in table.columns:
        typer.echo(f"  {column.name:<10} {column.type.value:<7} {column.description}")
    if table.get_config is not None:
        typer.echo(f"Key columns ({table.get_config.key_columns.mode}): {', '.join(table.get_config.key_columns.columns)}")


@app.command("query")
def query(
    ctx: typer.Context,
    table_name: str = typer.Argument(..., help="Name of the table."),
    where: Optional[List[str]] = typer.Option(
        None,
        "--where",
        "-w",
        help="Equality qualifier in the form column=value. Can be repeated.",
    ),
) -> None:
    """Fetch rows and print them as JSON lines."""

    registry = _require_registry(ctx)
    context = _require_context(ctx)
    table = registry.get(table_name)
    if table is None:
        typer.echo(f"Table '{table_name}' is not registered.", err=True)
        raise typer.Exit(code=1)

    quals = _parse_where(where)
    try:
        execute(table, context, quals, emit=lambda row: typer.echo(json.dumps(row, ensure_ascii=False)))
    except QueryPlanError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except AdapterError as exc:
        typer.echo(f"Query failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":  # pragma: no cover
    app()
