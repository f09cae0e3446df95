"""
CLI: ``tablekit``: schema codegen from the command line.

    tablekit codegen schema.sql                       # interface declaration
    tablekit codegen schema.sql --format python -o db_types.py
    tablekit codegen schema.sql -t users -t photos --name AppTables
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from tablekit.codegen import codegen_types
from tablekit.errors import ConfigError, TablekitError
from tablekit.logging import configure_logging, get_logger
from tablekit.settings import get_settings

app = typer.Typer(
    name="tablekit",
    help="tablekit: single-table data access helpers and schema codegen.",
    no_args_is_help=True,
)

err_console = Console(stderr=True)
logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError, version as pkg_version

        try:
            v = pkg_version("tablekit")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"tablekit {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tablekit CLI."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def _read_schema(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read schema file {str(path)!r}: {exc}", cause=exc) from exc


@app.command()
def codegen(
    schema: Path = typer.Argument(..., help="DDL script to introspect"),
    table: list[str] | None = typer.Option(
        None, "--table", "-t", help="Table to include (repeatable); default: all"
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="Name of the generated type"),
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Output format: interface or python"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Generate row type declarations from a schema script."""
    settings = get_settings()
    try:
        script = _read_schema(schema)
        text = asyncio.run(
            codegen_types(
                script,
                table or None,
                type_name=name or settings.type_name,
                fmt=fmt or settings.codegen_format,
                terminator=settings.statement_terminator,
            )
        )
    except TablekitError as exc:
        logger.error("codegen_failed", **exc.to_dict())
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {exc.message}")
        raise typer.Exit(code=1) from exc

    if output is None:
        typer.echo(text, nl=False)
    else:
        output.write_text(text, encoding="utf-8")
        err_console.print(f"[green]Wrote[/green] {output}")


if __name__ == "__main__":
    app()
