"""Process exit codes returned by :func:`bp_cli.cli.app.main`."""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed; also used when the operator declines a confirmation."""

GENERAL_ERROR: int = 1
"""A :class:`~bp_cli.exceptions.BpCliError` was reported, or at least one
item of a multi-id batch failed."""

UNEXPECTED_ERROR: int = 2
"""An exception outside the bp-cli hierarchy escaped the command.
argparse usage errors share this value."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C (128 + SIGINT)."""
