"""End-to-end tests for ``bp message`` against a real SQLite database."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from bp_cli.cli import exit_codes
from bp_cli.core.models import MessageQuery, User
from bp_cli.infra.sqlite_backend import SqliteBackend


@pytest.fixture()
def thread(users: dict[str, User], run: Callable[..., int]) -> int:
    """A thread between alice and bob, created through the CLI."""
    run(
        "message", "create", "--from=alice", "--to=bob",
        "--subject=Planning", "--content=Meet at noon",
        "--date-sent=2024-03-01 12:00:00", "--silent",
    )
    return 1


class TestCreate:
    def test_success_message(
        self,
        users: dict[str, User],
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message", "create", "--from=1", "--to=bob") == exit_codes.SUCCESS
        assert "Success: Message successfully created." in capsys.readouterr().out

    def test_porcelain_prints_thread_id_only(
        self,
        users: dict[str, User],
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "add", "--from=alice", "--to=bob", "--porcelain")
        assert capsys.readouterr().out == "1\n"

    def test_silent_prints_nothing(
        self,
        users: dict[str, User],
        backend: SqliteBackend,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "create", "--from=alice", "--to=bob", "--silent=true", "--porcelain")
        assert capsys.readouterr().out == ""
        assert backend.table_counts()["messages"] == 1

    def test_reply_in_thread(
        self,
        thread: int,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        capsys.readouterr()
        run("message", "create", "--from=bob", "--to=alice", f"--thread-id={thread}", "--porcelain")
        assert capsys.readouterr().out == f"{thread}\n"

    def test_unknown_user_creates_nothing(
        self,
        users: dict[str, User],
        backend: SqliteBackend,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "create", "--from=ghost", "--to=bob") == exit_codes.GENERAL_ERROR
        assert "No user found by that username or ID." in capsys.readouterr().err
        assert backend.table_counts()["messages"] == 0

    def test_outsider_reply_fails(
        self,
        thread: int,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = run_cli("message", "create", "--from=carol", "--to=bob", f"--thread-id={thread}")
        assert code == exit_codes.GENERAL_ERROR
        assert "Could not add a message." in capsys.readouterr().err


class TestDelete:
    def test_participant_deletes(
        self,
        thread: int,
        backend: SqliteBackend,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message", "delete", str(thread), "--user-id=alice", "--yes") == exit_codes.SUCCESS
        assert "Success: Thread successfully deleted." in capsys.readouterr().out
        assert backend.check_thread_access(thread, 1) is None

    def test_access_denied_keeps_thread(
        self,
        thread: int,
        backend: SqliteBackend,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = run_cli("message", "remove", str(thread), "--user-id=carol", "--yes")
        assert code == exit_codes.GENERAL_ERROR
        assert "This user has no access to this thread." in capsys.readouterr().err
        assert backend.check_thread_access(thread, 1) is not None
        assert backend.table_counts()["messages"] == 1


    def test_unknown_user_changes_nothing(
        self,
        thread: int,
        backend: SqliteBackend,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        before = backend.table_counts()
        code = run_cli("message", "delete", str(thread), "--user-id=ghost", "--yes")
        assert code == exit_codes.GENERAL_ERROR
        assert "No user found by that username or ID." in capsys.readouterr().err
        assert backend.table_counts() == before
        assert backend.check_thread_access(thread, 1) is not None
        assert backend.check_thread_access(thread, 2) is not None


class TestGetAndList:
    def test_get_json(
        self,
        thread: int,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "see", "1", "--format=json")
        record = json.loads(capsys.readouterr().out)
        assert record["subject"] == "Planning"
        assert record["thread_id"] == thread
        assert record["is_starred"] is False

    def test_get_missing(
        self,
        users: dict[str, User],
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "get", "42") == exit_codes.GENERAL_ERROR
        assert "No message found" in capsys.readouterr().err

    def test_list_respects_count(
        self,
        users: dict[str, User],
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        for i in range(4):
            run("message", "create", "--from=alice", "--to=bob", f"--subject=s{i}", "--silent")
        run("message", "list", "--user-id=alice", "--count=3", "--format=count")
        assert capsys.readouterr().out.strip() == "3"

    def test_unknown_box_falls_back_to_sentbox(
        self,
        thread: int,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "list", "--user-id=alice", "--box=trash", "--format=ids")
        assert capsys.readouterr().out.strip() == "1"

    def test_inbox_json_fields(
        self,
        thread: int,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "list", "--user-id=bob", "--box=inbox", "--format=json", "--fields=id,subject")
        assert json.loads(capsys.readouterr().out) == [{"id": 1, "subject": "Planning"}]

    def test_missing_user_id_is_user_not_found(
        self,
        thread: int,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "list") == exit_codes.GENERAL_ERROR
        assert "No user found by that username or ID." in capsys.readouterr().err

    def test_nothing_found(
        self,
        thread: int,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "list", "--user-id=carol") == exit_codes.GENERAL_ERROR
        assert "No messages found." in capsys.readouterr().err


class TestGenerate:
    def test_creates_messages(
        self,
        users: dict[str, User],
        backend: SqliteBackend,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message", "generate", "--count=3") == exit_codes.SUCCESS
        assert "Success: Generated 3 messages." in capsys.readouterr().out
        assert backend.table_counts()["messages"] == 3

    def test_requires_users(
        self, run_cli: Callable[..., int], capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "generate", "--count=2") == exit_codes.GENERAL_ERROR
        assert "No users available" in capsys.readouterr().err


class TestStars:
    def test_star_then_unstar(
        self,
        thread: int,
        backend: SqliteBackend,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message", "star", "--message-id=1", "--user-id=bob") == exit_codes.SUCCESS
        assert "Success: Message was successfully starred." in capsys.readouterr().out
        assert backend.is_message_starred(1, 2)

        assert run("message", "unstar", f"--thread-id={thread}", "--user-id=bob") == exit_codes.SUCCESS
        assert "Success: Message was successfully unstarred." in capsys.readouterr().out
        assert not backend.is_message_starred(1, 2)

    def test_already_starred(
        self,
        thread: int,
        run: Callable[..., int],
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "star", f"--thread-id={thread}", "--user-id=alice")
        capsys.readouterr()
        assert run_cli("message", "star", "--message-id=1", "--user-id=alice") == exit_codes.GENERAL_ERROR
        assert "The message is already starred." in capsys.readouterr().err

    def test_unstar_not_starred(
        self,
        thread: int,
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run_cli("message", "unstar", "--message-id=1", "--user-id=bob") == exit_codes.GENERAL_ERROR
        assert "Message was not unstarred." in capsys.readouterr().err

    def test_unstar_unknown_user_keeps_stars(
        self,
        thread: int,
        backend: SqliteBackend,
        run: Callable[..., int],
        run_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        run("message", "star", "--message-id=1", "--user-id=bob")
        capsys.readouterr()
        before = backend.table_counts()

        code = run_cli("message", "unstar", f"--thread-id={thread}", "--user-id=ghost")

        assert code == exit_codes.GENERAL_ERROR
        assert "No user found by that username or ID." in capsys.readouterr().err
        assert backend.table_counts() == before
        assert backend.is_message_starred(1, 2)

    def test_target_is_required(self, users: dict[str, User], run_cli: Callable[..., int]) -> None:
        assert run_cli("message", "star", "--user-id=bob") == 2


class TestSendNotice:
    def test_send(
        self,
        users: dict[str, User],
        backend: SqliteBackend,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert run("message", "send_notice", "--subject=Maintenance", "--content=Tonight") == exit_codes.SUCCESS
        assert "Success: Notice was successfully sent." in capsys.readouterr().out

        notice = backend.active_notice()
        assert notice is not None and notice["subject"] == "Maintenance"
        listed = backend.list_messages(MessageQuery(user_id=1, box="notices"))
        assert [n.message for n in listed] == ["Tonight"]

    def test_defaults(
        self, users: dict[str, User], backend: SqliteBackend, run: Callable[..., int],
    ) -> None:
        run("message", "send")
        notice = backend.active_notice()
        assert notice is not None and notice["subject"] == "Random Notice Subject"
