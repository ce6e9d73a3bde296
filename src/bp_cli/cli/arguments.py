"""argparse helpers shared by the command modules."""

from __future__ import annotations

import argparse
from collections.abc import Sequence


def positive_int(raw: str) -> int:
    """argparse ``type`` accepting integers >= 1."""
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {raw!r}")
    return value


def non_negative_int(raw: str) -> int:
    """argparse ``type`` accepting integers >= 0."""
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {raw!r}")
    return value


def add_output_options(
    parser: argparse.ArgumentParser,
    formats: Sequence[str],
    *,
    fields_help: str,
) -> None:
    """Attach ``--fields`` and ``--format`` to *parser*."""
    parser.add_argument("--fields", default=None, help=fields_help)
    parser.add_argument(
        "--format",
        default="table",
        choices=list(formats),
        help="Render output in a particular format (default: table).",
    )
