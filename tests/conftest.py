"""Shared pytest fixtures and configuration for the bp-cli test suite.

Guidelines
----------
* Every test gets its own SQLite file under ``tmp_path``.
* Service tests mock the storage protocols; backend and CLI tests use
  the real :class:`SqliteBackend`.
* Rich must render plain text so output assertions stay stable.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from bp_cli.cli.app import cli, main
from bp_cli.config import Settings
from bp_cli.core.models import User
from bp_cli.infra.sqlite_backend import SqliteBackend


@pytest.fixture(autouse=True)
def _plain_rich_output(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FORCE_COLOR", "TTY_COMPATIBLE", "TTY_INTERACTIVE", "BP_CLI_COMPONENTS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COLUMNS", "120")


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "bp.sqlite3"


@pytest.fixture()
def settings(db_path: Path) -> Settings:
    return Settings(db_path=db_path)


@pytest.fixture()
def backend(db_path: Path) -> Iterator[SqliteBackend]:
    with SqliteBackend(db_path) as store:
        yield store


@pytest.fixture()
def users(backend: SqliteBackend) -> dict[str, User]:
    """Three accounts: alice (#1), bob (#2), carol (#3)."""
    return {
        login: backend.add_user(login, f"{login}@example.com")
        for login in ("alice", "bob", "carol")
    }


@pytest.fixture()
def run(settings: Settings) -> Callable[..., int]:
    """Call :func:`main` against the test database."""

    def _run(*argv: str) -> int:
        return main(list(argv), settings=settings)

    return _run


@pytest.fixture()
def run_cli(db_path: Path) -> Callable[..., int]:
    """Call the :func:`cli` error boundary and return its exit code."""

    def _run(*argv: str) -> int:
        with pytest.raises(SystemExit) as exc_info:
            cli(["--db", str(db_path), *argv])
        code = exc_info.value.code
        return int(code) if code is not None else 0

    return _run
