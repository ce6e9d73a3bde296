"""Interactive confirmation for destructive commands.

``--yes`` skips the prompt entirely, which is how scripts and tests run
the ``delete`` subcommands.  Otherwise questionary asks a yes/no
question; Ctrl+C or Esc count as "no".
"""

from __future__ import annotations

from typing import Any

from bp_cli.exceptions import EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
            hint="Or pass --yes to skip the confirmation.",
        ) from exc
    return questionary


def confirm(question: str, *, assume_yes: bool = False) -> bool:
    """Ask *question* and return the operator's answer.

    Returns ``True`` immediately when *assume_yes* is set.
    """
    if assume_yes:
        return True

    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(question, default=False).ask()
    return bool(answer)
