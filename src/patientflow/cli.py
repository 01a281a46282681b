"""
PatientFlow CLI.

Inspect the seeded entity stores from a terminal:

- patientflow entities: entity names and record counts
- patientflow query <Entity>: filter, sort and page through records
- patientflow show <Entity> <id>: one record as JSON
- patientflow users: the static user directory
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from patientflow import __version__
from patientflow.core.config import PatientFlowConfig, load_config
from patientflow.core.errors import PatientFlowError
from patientflow.runtime.logging import setup_logging
from patientflow.runtime.registry import StoreRegistry, build_default_registry
from patientflow.runtime.session import Session

app = typer.Typer(
    help="PatientFlow entity store inspection commands",
    no_args_is_help=True,
)

console = Console()

MAX_DEFAULT_COLUMNS = 6


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"patientflow {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to patientflow.toml",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store operations"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """PatientFlow entity store."""
    try:
        settings = load_config(config)
    except PatientFlowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    setup_logging(
        settings.logging.dir,
        level=logging.DEBUG if verbose else settings.logging.level_number,
    )
    ctx.obj = settings


def _registry(ctx: typer.Context) -> StoreRegistry:
    settings: PatientFlowConfig = ctx.obj or PatientFlowConfig()
    try:
        return build_default_registry(settings)
    except (PatientFlowError, FileNotFoundError, NotADirectoryError) as e:
        typer.echo(f"Error loading seed data: {e}", err=True)
        raise typer.Exit(code=1)


def parse_where(clauses: list[str]) -> dict[str, Any]:
    """
    Parse ``field=value`` clauses into a predicate.

    Values that parse as JSON literals keep their type (``42``, ``true``,
    ``null``); anything else is a string.
    """
    query: dict[str, Any] = {}
    for clause in clauses:
        field, sep, raw = clause.partition("=")
        if not sep or not field:
            raise typer.BadParameter(f"Expected field=value, got '{clause}'", param_hint="--where")
        try:
            query[field] = json.loads(raw)
        except json.JSONDecodeError:
            query[field] = raw
    return query


def _records_table(title: str, records: list[dict[str, Any]], fields: list[str]) -> Table:
    table = Table(title=title)
    for field in fields:
        table.add_column(field)
    for record in records:
        table.add_row(*("" if record.get(f) is None else str(record.get(f)) for f in fields))
    return table


@app.command(name="entities")
def entities_command(ctx: typer.Context) -> None:
    """List entity stores and their record counts."""
    registry = _registry(ctx)

    table = Table(title="Entity stores")
    table.add_column("Entity")
    table.add_column("Records", justify="right")
    for name, count in registry.counts().items():
        table.add_row(name, str(count))
    console.print(table)


@app.command(name="query")
def query_command(
    ctx: typer.Context,
    entity: str = typer.Argument(..., help="Entity name, e.g. Patient"),
    where: list[str] | None = typer.Option(
        None,
        "--where",
        "-w",
        help="Filter clause field=value (repeatable); strings match case-insensitively",
    ),
    sort: str | None = typer.Option(None, "--sort", "-s", help="Sort field, '-' prefix for descending"),
    page: int = typer.Option(1, "--page", "-p", help="Page number (1-indexed)"),
    limit: int | None = typer.Option(None, "--limit", "-l", help="Records per page"),
    fields: list[str] | None = typer.Option(None, "--field", "-f", help="Columns to show (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Print the page envelope as JSON"),
) -> None:
    """Filter, sort and page through an entity's records."""
    registry = _registry(ctx)
    query = parse_where(where or [])

    try:
        store = registry[entity]
        result = store.find_with_pagination(query, page, limit, sort=sort)
    except PatientFlowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    if not result.data:
        typer.echo(f"No {entity} records match (total {result.pagination.total}).")
        return

    columns = fields or list(result.data[0])[:MAX_DEFAULT_COLUMNS]
    console.print(_records_table(entity, result.data, columns))
    info = result.pagination
    typer.echo(f"Page {info.page} of {info.total_pages} ({info.total} records)")


@app.command(name="show")
def show_command(
    ctx: typer.Context,
    entity: str = typer.Argument(..., help="Entity name"),
    record_id: str = typer.Argument(..., help="Record id"),
) -> None:
    """Show one record as JSON."""
    registry = _registry(ctx)

    try:
        store = registry[entity]
    except PatientFlowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    record = store.find_by_id(record_id)
    if record is None:
        typer.echo(f"{entity} record not found: {record_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(record, indent=2, default=str))


@app.command(name="users")
def users_command() -> None:
    """List the dashboard's users."""
    session = Session()
    users = session.list_users()
    console.print(_records_table("Users", users, ["id", "name", "role", "department", "email"]))
    current = session.get_current_user()
    typer.echo(f"Current user: {current['name']} ({current['role']})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
