"""CLI application entry point and command routing for bp-cli.

This module is the **sole error boundary** for the entire application.
It catches :class:`~bp_cli.exceptions.BpCliError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering operator-friendly messages
via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — handlers in ``signup_commands`` and
  ``message_commands`` delegate to the core services.
* Each command group is gated on its component being active.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.logging import RichHandler
from rich.markup import escape

from bp_cli.cli import exit_codes, message_commands, signup_commands
from bp_cli.cli.console import error, get_stderr_console
from bp_cli.config import Settings
from bp_cli.exceptions import BpCliError, ComponentInactiveError
from bp_cli.infra.sqlite_backend import SqliteBackend
from bp_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser with every command group."""
    parser = argparse.ArgumentParser(
        prog="bp",
        description="Manage community signups and private messages.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--db",
        default=None,
        metavar="PATH",
        help="SQLite database file (default: $BP_CLI_DB or bp.sqlite3).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug records to stderr.",
    )
    parser.set_defaults(handler=None, group_parser=None, component=None)

    groups = parser.add_subparsers(metavar="<group>")
    signup_commands.register(groups)
    message_commands.register(groups)

    doctor = groups.add_parser("doctor", help="Run environment diagnostics.")
    doctor.set_defaults(handler=_handle_doctor)
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_doctor(args: argparse.Namespace, settings: Settings) -> int:
    from bp_cli.cli.doctor import run_doctor

    return run_doctor(settings)


def _require_component(args: argparse.Namespace, settings: Settings) -> None:
    """Raise unless the component behind the command group is active."""
    if args.component is None or settings.is_component_active(args.component):
        return
    raise ComponentInactiveError(
        f"The {args.component_label} component is not active.",
        hint=f"Add {args.component!r} to BP_CLI_COMPONENTS.",
    )


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich on stderr.

    Unknown level names fall back to ``WARNING``.
    """
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int) or isinstance(numeric, bool):
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[
            RichHandler(console=get_stderr_console(), rich_tracebacks=True, show_path=False),
        ],
        force=True,
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run the bp CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    settings:
        Base settings.  When ``None``, they are read from the environment.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    base = settings if settings is not None else Settings.from_env()
    settings = base.with_overrides(db_path=args.db, debug=args.debug)
    configure_logging(settings.log_level)

    if args.handler is None:
        (args.group_parser or parser).print_help()
        return exit_codes.SUCCESS

    if args.handler is _handle_doctor:
        return _handle_doctor(args, settings)

    _require_component(args, settings)
    logger.debug("using database %s", settings.db_path)
    with SqliteBackend(settings.db_path) as backend:
        return args.handler(args, backend)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli(argv: list[str] | None = None) -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a raw
    stack trace during normal usage.
    """
    try:
        code = main(argv)
        sys.exit(code)
    except BpCliError as exc:
        error(str(exc), exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        get_stderr_console().print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        get_stderr_console().print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
