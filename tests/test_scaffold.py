"""Smoke tests — verify package wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
* Command groups route and honour the component gate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from bp_cli import __version__
from bp_cli.cli import exit_codes
from bp_cli.cli.app import configure_logging, main
from bp_cli.config import Settings
from bp_cli.exceptions import (
    AccessDeniedError,
    BackendError,
    BpCliError,
    ComponentInactiveError,
    EnvironmentError,
    InvalidInputError,
    NotFoundError,
    OperationFailedError,
    UserNotFoundError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            UserNotFoundError,
            AccessDeniedError,
            NotFoundError,
            OperationFailedError,
            InvalidInputError,
            ComponentInactiveError,
            BackendError,
            EnvironmentError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[BpCliError]
    ) -> None:
        assert issubclass(exc_class, BpCliError)

    def test_hint_is_stored(self) -> None:
        err = BpCliError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_user_not_found_has_default_message(self) -> None:
        assert str(UserNotFoundError()) == "No user found by that username or ID."


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_values(self) -> None:
        assert exit_codes.SUCCESS == 0
        assert exit_codes.GENERAL_ERROR == 1
        assert exit_codes.UNEXPECTED_ERROR == 2
        assert exit_codes.KEYBOARD_INTERRUPT == 130


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TestRouting:
    def test_no_args_prints_help(
        self, run: Callable[..., int], capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run() == exit_codes.SUCCESS
        assert "usage: bp" in capsys.readouterr().out

    def test_group_without_command_prints_group_help(
        self, run: Callable[..., int], capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message") == exit_codes.SUCCESS
        assert "usage: bp message" in capsys.readouterr().out

    def test_version_flag(self, run: Callable[..., int]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run("--version")
        assert exc_info.value.code == 0

    def test_unknown_subcommand_is_usage_error(self, run: Callable[..., int]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run("message", "frobnicate")
        assert exc_info.value.code == 2


class TestComponentGate:
    def test_inactive_message_component(self, db_path: Path) -> None:
        settings = Settings(db_path=db_path, active_components=("signups",))
        with pytest.raises(ComponentInactiveError, match="Message component is not active"):
            main(["message", "send"], settings=settings)

    def test_inactive_signup_component(self, db_path: Path) -> None:
        settings = Settings(db_path=db_path, active_components=("messages",))
        with pytest.raises(ComponentInactiveError, match="Signup component is not active"):
            main(["signup", "list"], settings=settings)

    def test_error_boundary_renders_component_error(
        self,
        monkeypatch: pytest.MonkeyPatch,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("BP_CLI_COMPONENTS", "signups")
        assert run_cli("message", "send") == exit_codes.GENERAL_ERROR
        assert "Error: The Message component is not active." in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("DEBUG", logging.DEBUG), ("info", logging.INFO), ("BASIC_FORMAT", logging.WARNING),
         ("nonsense", logging.WARNING), ("raiseExceptions", logging.WARNING)],
    )
    def test_level_names(self, name: str, expected: int) -> None:
        configure_logging(name)
        assert logging.getLogger().level == expected

    def test_bad_level_does_not_break_commands(
        self, db_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        settings = Settings(db_path=db_path, log_level="BASIC_FORMAT")
        assert main(["message", "send"], settings=settings) == exit_codes.SUCCESS
        assert "Notice was successfully sent." in capsys.readouterr().out
