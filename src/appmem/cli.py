from __future__ import annotations

from typing import List, NoReturn, Optional

import typer
from rich.markup import escape

from appmem import __version__
from appmem.config import DEFAULT_LIMIT, load_settings
from appmem.display import print_report
from appmem.errors import ConfigurationError, SnapshotError
from appmem.logging import err_console, set_verbose
from appmem.report import build_report
from appmem.snapshot import take_snapshot

EXIT_SNAPSHOT_ERROR = 1
EXIT_CONFIG_ERROR = 2

app = typer.Typer(
    name="appmem",
    add_completion=False,
    help="Show memory usage grouped by application.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"appmem {__version__}")
        raise typer.Exit(0)


def _fail(message: str, code: int) -> NoReturn:
    err_console().print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code)


@app.command()
def report(
    limit: Optional[str] = typer.Argument(
        None,
        metavar="[LIMIT]",
        help=f"Maximum rows to show (default {DEFAULT_LIMIT}, 0 for all).",
        show_default=False,
    ),
    java_by: str = typer.Option(
        "auto", "--java-by", help="Name Java processes by: auto, jar or main."
    ),
    relative_to: str = typer.Option(
        "processes",
        "--relative-to",
        help="Percentages of: processes (sum of all groups) or system (installed memory).",
    ),
    include_empty: bool = typer.Option(
        False, "--include-empty", help="Keep processes with no resident memory."
    ),
    launcher: Optional[List[str]] = typer.Option(
        None, "--launcher", help="Command name to disambiguate by arguments (repeatable)."
    ),
    json: bool = typer.Option(False, "--json", help="Raw JSON output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """
    Report memory usage of all processes, grouped by application.

    Java processes are named after their -jar archive or main class. With a
    row limit, smaller groups are left out and the cumulative percentage of
    the last row stays below 100%.
    """
    set_verbose(verbose)

    try:
        settings = load_settings(
            limit=limit,
            java_by=java_by,
            relative_to=relative_to,
            include_empty=include_empty,
            launchers=launcher,
        )
    except ConfigurationError as e:
        _fail(str(e), EXIT_CONFIG_ERROR)

    try:
        snapshot = take_snapshot(include_empty=settings.include_empty)
    except SnapshotError as e:
        _fail(str(e), EXIT_SNAPSHOT_ERROR)

    print_report(
        build_report(snapshot.records, settings, system_memory_bytes=snapshot.system_memory_bytes),
        as_json=json,
    )


def main() -> None:
    """Entry point for the appmem command."""
    app()


if __name__ == "__main__":
    main()
