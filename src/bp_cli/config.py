"""Runtime configuration for bp-cli.

Settings are read from environment variables and may be overridden by
the global command-line options (``--db``, ``--debug``).

Usage::

    from bp_cli.config import Settings
    settings = Settings.from_env()
    settings.db_path
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_DB_PATH = "bp.sqlite3"
DEFAULT_COMPONENTS: tuple[str, ...] = ("signups", "messages")
DEFAULT_LOG_LEVEL = "WARNING"

ENV_DB_PATH = "BP_CLI_DB"
ENV_COMPONENTS = "BP_CLI_COMPONENTS"
ENV_LOG_LEVEL = "BP_CLI_LOG_LEVEL"


def _split_components(raw: str) -> tuple[str, ...]:
    """Parse a comma separated component list, dropping blanks."""
    return tuple(
        part.strip().lower() for part in raw.split(",") if part.strip()
    )


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable runtime settings."""

    db_path: Path
    """SQLite database file backing every command."""

    active_components: tuple[str, ...] = DEFAULT_COMPONENTS
    """Components whose command groups may run."""

    log_level: str = DEFAULT_LOG_LEVEL
    """Name of the stdlib logging level."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        raw_components = env.get(ENV_COMPONENTS)
        components = (
            _split_components(raw_components)
            if raw_components is not None
            else DEFAULT_COMPONENTS
        )

        return cls(
            db_path=Path(env.get(ENV_DB_PATH) or DEFAULT_DB_PATH).expanduser(),
            active_components=components,
            log_level=(env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper(),
        )

    def with_overrides(
        self,
        *,
        db_path: str | None = None,
        debug: bool = False,
    ) -> Settings:
        """Return a copy with command-line overrides applied."""
        updated = self
        if db_path:
            updated = replace(updated, db_path=Path(db_path).expanduser())
        if debug:
            updated = replace(updated, log_level="DEBUG")
        return updated

    def is_component_active(self, component: str) -> bool:
        return component.lower() in self.active_components
