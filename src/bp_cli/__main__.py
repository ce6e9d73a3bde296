"""Allow ``python -m bp_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m bp_cli`` behaves identically to the ``bp`` console
script.
"""

from __future__ import annotations

from bp_cli.cli.app import cli

if __name__ == "__main__":
    cli()
