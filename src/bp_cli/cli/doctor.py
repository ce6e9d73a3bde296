"""``bp doctor`` — environment diagnostics command.

Collects the tool version, Python version, database reachability and
component state, and renders them as a Rich table on stderr.  Row
counts of the database tables follow when the database opens.
"""

from __future__ import annotations

import platform
import sys

from rich.markup import escape
from rich.table import Table

from bp_cli.cli import exit_codes
from bp_cli.cli.console import get_stderr_console
from bp_cli.config import DEFAULT_COMPONENTS, Settings
from bp_cli.exceptions import BackendError
from bp_cli.infra.sqlite_backend import SCHEMA_VERSION, SqliteBackend
from bp_cli.version import __version__

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _version_check() -> tuple[str, str, str]:
    return "bp-cli", __version__, OK


def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", version, OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _database_check(backend: SqliteBackend) -> tuple[str, str, str]:
    """Return the database row; opening the backend creates the schema."""
    try:
        version = backend.schema_version()
    except BackendError as exc:
        return "Database", str(exc), FAIL
    status = OK if version == SCHEMA_VERSION else f"[yellow]WARN (schema v{version})[/yellow]"
    return "Database", str(backend.db_path), status


def _component_checks(settings: Settings) -> list[tuple[str, str, str]]:
    rows = []
    for component in DEFAULT_COMPONENTS:
        if settings.is_component_active(component):
            rows.append((f"component:{component}", "active", OK))
        else:
            rows.append((f"component:{component}", "inactive", WARN))
    return rows


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(settings: Settings) -> int:
    """Execute all checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    console = get_stderr_console()

    with SqliteBackend(settings.db_path) as backend:
        checks = [
            _version_check(),
            _python_version_check(),
            _database_check(backend),
            *_component_checks(settings),
        ]
        has_failure = any("FAIL" in status for _, _, status in checks)

        table = Table(
            title="bp doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Check", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, escape(value), status)

        console.print()
        console.print(table)

        if not has_failure:
            counts = Table(title="Rows", show_header=True, border_style="dim")
            counts.add_column("Table", style="bold")
            counts.add_column("Rows", justify="right")
            for name, count in backend.table_counts().items():
                counts.add_row(name, str(count))
            console.print(counts)
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
