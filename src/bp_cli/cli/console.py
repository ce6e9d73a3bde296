"""Console helpers for the CLI layer.

Two Rich consoles are used:

* **stdout** — command results: ``Success:`` lines, tables, raw data.
* **stderr** — warnings, errors, hints, progress bars and log records.

Consoles are created per call so they always target the current
``sys.stdout`` / ``sys.stderr`` (which pytest's ``capsys`` swaps).
Operator-supplied text is escaped before it is embedded in markup.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape

from bp_cli.cli import exit_codes
from bp_cli.core.models import Outcome


def get_stdout_console() -> Console:
    return Console(soft_wrap=True)


def get_stderr_console() -> Console:
    return Console(stderr=True, soft_wrap=True)


def line(text: object = "") -> None:
    """Write *text* verbatim to stdout — no markup, no highlighting."""
    print(text)


def success(message: str) -> None:
    get_stdout_console().print(f"[bold green]Success:[/bold green] {escape(message)}")


def warning(message: str) -> None:
    get_stderr_console().print(f"[yellow]Warning:[/yellow] {escape(message)}")


def error(message: str, hint: str | None = None) -> None:
    """Render an error (and optional hint) on stderr."""
    err = get_stderr_console()
    err.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if hint:
        err.print(f"[yellow]Hint:[/yellow] {escape(hint)}")


def report_outcomes(outcomes: Iterable[Outcome]) -> int:
    """Print each batch outcome as it arrives; return the exit code.

    Failed items are reported as warnings and do not stop the batch.
    """
    failed = False
    for outcome in outcomes:
        if outcome.success:
            success(outcome.message)
        else:
            warning(outcome.message)
            failed = True
    return exit_codes.GENERAL_ERROR if failed else exit_codes.SUCCESS
