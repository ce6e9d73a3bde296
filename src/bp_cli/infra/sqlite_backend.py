"""SQLite implementation of every storage protocol consumed by the core.

This module is the **only** place in the codebase that imports
``sqlite3``.  All ``sqlite3`` exceptions are caught here and re-raised
as :class:`~bp_cli.exceptions.BackendError` — nothing raw escapes the
infrastructure boundary.

Schema
------
users          accounts (login, email, display name)
signups        registrations; ``active = 1`` once activated
messages       one row per message, grouped by ``thread_id``
threads        thread id allocator; ids are never reused
recipients     thread participants with unread / deleted state
message_stars  per-user star flags
notices        site-wide notices; only the latest is active
email_outbox   queued outbound email
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType
from typing import Any

from bp_cli.core.models import Message, MessageQuery, NewMessage, Signup, User
from bp_cli.core.resolver import current_time
from bp_cli.exceptions import BackendError, OperationFailedError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

_SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_login TEXT NOT NULL UNIQUE,
        user_email TEXT NOT NULL DEFAULT '',
        display_name TEXT NOT NULL DEFAULT '',
        user_registered TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS signups (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_login TEXT NOT NULL,
        user_email TEXT NOT NULL,
        activation_key TEXT NOT NULL UNIQUE,
        registered TEXT NOT NULL,
        activated TEXT,
        active INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        thread_id INTEGER NOT NULL,
        sender_id INTEGER NOT NULL,
        subject TEXT NOT NULL DEFAULT '',
        message TEXT NOT NULL DEFAULT '',
        date_sent TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_messages_thread ON messages(thread_id)",
    """
    CREATE TABLE IF NOT EXISTS threads (
        id INTEGER PRIMARY KEY AUTOINCREMENT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS recipients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        thread_id INTEGER NOT NULL,
        unread_count INTEGER NOT NULL DEFAULT 0,
        sender_only INTEGER NOT NULL DEFAULT 0,
        is_deleted INTEGER NOT NULL DEFAULT 0,
        UNIQUE (user_id, thread_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS message_stars (
        message_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        PRIMARY KEY (message_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        subject TEXT NOT NULL,
        message TEXT NOT NULL,
        date_sent TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS email_outbox (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        recipient TEXT NOT NULL,
        subject TEXT NOT NULL,
        body TEXT NOT NULL,
        queued_at TEXT NOT NULL
    )
    """,
    "INSERT OR IGNORE INTO threads (id) SELECT DISTINCT thread_id FROM recipients",
)

TABLES: tuple[str, ...] = (
    "users",
    "signups",
    "threads",
    "messages",
    "recipients",
    "message_stars",
    "notices",
    "email_outbox",
)

ACTIVATION_SUBJECT = "Activate your account"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqliteBackend:
    """Concrete user directory, signup store, mailer and message store.

    Usage::

        with SqliteBackend(Path("bp.sqlite3")) as backend:
            backend.get_user_by_login("admin")

    The connection is opened lazily on first use and the schema is
    created when missing.  Every mutating call commits on success and
    rolls back on failure.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path: Path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> SqliteBackend:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection (idempotent)."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        try:
            conn = sqlite3.connect(self.db_path, timeout=10.0)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            version = conn.execute("PRAGMA user_version").fetchone()[0]
            if version < SCHEMA_VERSION:
                for statement in _SCHEMA:
                    conn.execute(statement)
                conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
                conn.commit()
                logger.debug("initialised schema v%d in %s", SCHEMA_VERSION, self.db_path)
        except sqlite3.Error as exc:
            raise BackendError(
                f"Could not open database {self.db_path}: {exc}",
                hint="Check the --db option or the BP_CLI_DB variable.",
            ) from exc
        self._conn = conn
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection, committing or rolling back around it."""
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise BackendError(f"Database error: {exc}") from exc
        except Exception:
            conn.rollback()
            raise

    def _fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchall()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def schema_version(self) -> int:
        row = self._fetchone("PRAGMA user_version")
        return int(row[0]) if row is not None else 0

    def table_counts(self) -> dict[str, int]:
        """Row count per table, in :data:`TABLES` order."""
        counts: dict[str, int] = {}
        for table in TABLES:
            row = self._fetchone(f"SELECT COUNT(*) FROM {table}")
            counts[table] = int(row[0]) if row is not None else 0
        return counts

    # ------------------------------------------------------------------
    # UserDirectory
    # ------------------------------------------------------------------

    @staticmethod
    def _user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            user_login=row["user_login"],
            user_email=row["user_email"],
            display_name=row["display_name"],
            user_registered=row["user_registered"],
        )

    def get_user_by_id(self, user_id: int) -> User | None:
        row = self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._user(row) if row is not None else None

    def get_user_by_login(self, user_login: str) -> User | None:
        row = self._fetchone("SELECT * FROM users WHERE user_login = ?", (user_login,))
        return self._user(row) if row is not None else None

    def random_user(self) -> User | None:
        row = self._fetchone("SELECT * FROM users ORDER BY RANDOM() LIMIT 1")
        return self._user(row) if row is not None else None

    def add_user(
        self,
        user_login: str,
        user_email: str = "",
        *,
        display_name: str = "",
        user_id: int | None = None,
        registered: str | None = None,
    ) -> User:
        """Insert an account and return it."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO users (id, user_login, user_email, display_name, user_registered)"
                " VALUES (?, ?, ?, ?, ?)",
                (user_id, user_login, user_email, display_name or user_login,
                 registered or current_time()),
            )
            new_id = int(cursor.lastrowid)
        logger.debug("added user #%d (%s)", new_id, user_login)
        user = self.get_user_by_id(new_id)
        if user is None:
            raise BackendError(f"User #{new_id} vanished after insert.")
        return user

    # ------------------------------------------------------------------
    # SignupStore
    # ------------------------------------------------------------------

    @staticmethod
    def _signup(row: sqlite3.Row) -> Signup:
        return Signup(
            id=row["id"],
            user_login=row["user_login"],
            user_email=row["user_email"],
            activation_key=row["activation_key"],
            registered=row["registered"],
            active=bool(row["active"]),
        )

    def add_signup(
        self,
        user_login: str,
        user_email: str,
        activation_key: str,
        *,
        signup_id: int | None = None,
        registered: str | None = None,
        active: bool = False,
    ) -> Signup:
        """Record a registration, as the host site does at signup time."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO signups (id, user_login, user_email, activation_key, registered, active)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (signup_id, user_login, user_email, activation_key,
                 registered or current_time(), int(active)),
            )
            new_id = int(cursor.lastrowid)
        signup = self.get_signup(new_id)
        if signup is None:
            raise BackendError(f"Signup #{new_id} vanished after insert.")
        return signup

    def get_signup(self, signup_id: int) -> Signup | None:
        row = self._fetchone("SELECT * FROM signups WHERE id = ?", (signup_id,))
        return self._signup(row) if row is not None else None

    def list_pending_signups(self, limit: int | None = None) -> list[Signup]:
        sql = "SELECT * FROM signups WHERE active = 0 ORDER BY registered, id"
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return [self._signup(row) for row in self._fetchall(sql, params)]

    def delete_signup(self, signup_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM signups WHERE id = ?", (signup_id,))
            return cursor.rowcount > 0

    def activate_signup(self, activation_key: str) -> int | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM signups WHERE activation_key = ? AND active = 0",
                (activation_key,),
            ).fetchone()
            if row is None:
                return None

            taken = conn.execute(
                "SELECT 1 FROM users WHERE user_login = ?", (row["user_login"],),
            ).fetchone()
            if taken is not None:
                raise OperationFailedError(
                    "Could not create the user account.",
                    hint=f"The login {row['user_login']!r} is already taken.",
                )

            now = current_time()
            cursor = conn.execute(
                "INSERT INTO users (user_login, user_email, display_name, user_registered)"
                " VALUES (?, ?, ?, ?)",
                (row["user_login"], row["user_email"], row["user_login"], now),
            )
            conn.execute(
                "UPDATE signups SET active = 1, activated = ? WHERE id = ?",
                (now, row["id"]),
            )
            return int(cursor.lastrowid)

    # ------------------------------------------------------------------
    # Mailer
    # ------------------------------------------------------------------

    def send_activation_email(self, signup: Signup) -> bool:
        """Queue the activation email of *signup* in the outbox."""
        if not signup.user_email:
            return False
        body = (
            f"Thanks for registering, {signup.user_login}!\n\n"
            f"To complete the activation of your account use this key: "
            f"{signup.activation_key}\n"
        )
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO email_outbox (recipient, subject, body, queued_at)"
                " VALUES (?, ?, ?, ?)",
                (signup.user_email, ACTIVATION_SUBJECT, body, current_time()),
            )
        logger.debug("queued activation email to %s", signup.user_email)
        return True

    def outbox(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self._fetchall("SELECT * FROM email_outbox ORDER BY id")]

    # ------------------------------------------------------------------
    # MessageStore — threads and messages
    # ------------------------------------------------------------------

    @staticmethod
    def _message(row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            thread_id=row["thread_id"],
            sender_id=row["sender_id"],
            subject=row["subject"],
            message=row["message"],
            date_sent=row["date_sent"],
            is_starred=bool(row["is_starred"]),
        )

    def create_message(self, new: NewMessage) -> int | None:
        with self._transaction() as conn:
            if new.thread_id is not None:
                participant = conn.execute(
                    "SELECT 1 FROM recipients WHERE thread_id = ? AND user_id = ?",
                    (new.thread_id, new.sender_id),
                ).fetchone()
                if participant is None:
                    logger.debug(
                        "user #%d is not part of thread #%d", new.sender_id, new.thread_id,
                    )
                    return None
                thread_id = new.thread_id
                conn.execute(
                    "UPDATE recipients SET unread_count = unread_count + 1, sender_only = 0,"
                    " is_deleted = 0"
                    " WHERE thread_id = ? AND user_id != ?",
                    (thread_id, new.sender_id),
                )
            else:
                cursor = conn.execute("INSERT INTO threads DEFAULT VALUES")
                thread_id = int(cursor.lastrowid)

            for recipient_id in new.recipient_ids:
                if recipient_id == new.sender_id:
                    continue
                conn.execute(
                    "INSERT OR IGNORE INTO recipients (user_id, thread_id, unread_count)"
                    " VALUES (?, ?, 1)",
                    (recipient_id, thread_id),
                )
            conn.execute(
                "INSERT OR IGNORE INTO recipients (user_id, thread_id, sender_only)"
                " VALUES (?, ?, ?)",
                (new.sender_id, thread_id, int(new.thread_id is None)),
            )
            conn.execute(
                "INSERT INTO messages (thread_id, sender_id, subject, message, date_sent)"
                " VALUES (?, ?, ?, ?, ?)",
                (thread_id, new.sender_id, new.subject, new.content, new.date_sent),
            )
        return thread_id

    def get_message(
        self, message_id: int, viewer_id: int | None = None,
    ) -> Message | None:
        if viewer_id is None:
            star_sql = "EXISTS (SELECT 1 FROM message_stars s WHERE s.message_id = m.id)"
            params: tuple[Any, ...] = (message_id,)
        else:
            star_sql = (
                "EXISTS (SELECT 1 FROM message_stars s"
                " WHERE s.message_id = m.id AND s.user_id = ?)"
            )
            params = (viewer_id, message_id)
        row = self._fetchone(
            f"SELECT m.*, {star_sql} AS is_starred FROM messages m WHERE m.id = ?",
            params,
        )
        return self._message(row) if row is not None else None

    def list_messages(self, query: MessageQuery) -> list[Message]:
        if query.box == "notices":
            return self._list_notices(query)

        clauses = ["r.is_deleted = 0"]
        params: list[Any] = [query.user_id, query.user_id]
        if query.box == "inbox":
            clauses.append("m.sender_id != ?")
        else:
            clauses.append("m.sender_id = ?")
        params.append(query.user_id)

        if query.type == "unread":
            clauses.append("r.unread_count > 0")
        elif query.type == "read":
            clauses.append("r.unread_count = 0")

        if query.search:
            clauses.append("(m.subject LIKE ? ESCAPE '\\' OR m.message LIKE ? ESCAPE '\\')")
            pattern = f"%{_escape_like(query.search)}%"
            params.extend((pattern, pattern))

        params.append(query.limit)
        sql = (
            "SELECT m.*, EXISTS (SELECT 1 FROM message_stars s"
            " WHERE s.message_id = m.id AND s.user_id = ?) AS is_starred"
            " FROM messages m"
            " JOIN recipients r ON r.thread_id = m.thread_id AND r.user_id = ?"
            f" WHERE {' AND '.join(clauses)}"
            " ORDER BY m.date_sent DESC, m.id DESC LIMIT ?"
        )
        return [self._message(row) for row in self._fetchall(sql, tuple(params))]

    def _list_notices(self, query: MessageQuery) -> list[Message]:
        sql = "SELECT *, 0 AS thread_id, 0 AS sender_id, 0 AS is_starred FROM notices"
        params: list[Any] = []
        if query.search:
            sql += " WHERE (subject LIKE ? ESCAPE '\\' OR message LIKE ? ESCAPE '\\')"
            pattern = f"%{_escape_like(query.search)}%"
            params.extend((pattern, pattern))
        sql += " ORDER BY date_sent DESC, id DESC LIMIT ?"
        params.append(query.limit)
        return [self._message(row) for row in self._fetchall(sql, tuple(params))]

    def check_thread_access(self, thread_id: int, user_id: int) -> int | None:
        row = self._fetchone(
            "SELECT id FROM recipients WHERE thread_id = ? AND user_id = ? AND is_deleted = 0",
            (thread_id, user_id),
        )
        return int(row["id"]) if row is not None else None

    def delete_thread(self, thread_id: int, user_id: int) -> bool:
        """Mark the thread deleted for *user_id*; purge it once nobody keeps it."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE recipients SET is_deleted = 1, unread_count = 0"
                " WHERE thread_id = ? AND user_id = ? AND is_deleted = 0",
                (thread_id, user_id),
            )
            if cursor.rowcount == 0:
                return False

            remaining = conn.execute(
                "SELECT COUNT(*) FROM recipients WHERE thread_id = ? AND is_deleted = 0",
                (thread_id,),
            ).fetchone()[0]
            if remaining == 0:
                conn.execute(
                    "DELETE FROM message_stars WHERE message_id IN"
                    " (SELECT id FROM messages WHERE thread_id = ?)",
                    (thread_id,),
                )
                conn.execute("DELETE FROM messages WHERE thread_id = ?", (thread_id,))
                conn.execute("DELETE FROM recipients WHERE thread_id = ?", (thread_id,))
                logger.debug("purged thread #%d", thread_id)
        return True

    def latest_message_id(self, thread_id: int) -> int | None:
        row = self._fetchone(
            "SELECT id FROM messages WHERE thread_id = ? ORDER BY date_sent DESC, id DESC LIMIT 1",
            (thread_id,),
        )
        return int(row["id"]) if row is not None else None

    # ------------------------------------------------------------------
    # MessageStore — stars
    # ------------------------------------------------------------------

    def is_message_starred(self, message_id: int, user_id: int) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM message_stars WHERE message_id = ? AND user_id = ?",
            (message_id, user_id),
        )
        return row is not None

    def star_message(self, message_id: int, user_id: int) -> bool:
        """Star a message of a thread *user_id* can access."""
        with self._transaction() as conn:
            allowed = conn.execute(
                "SELECT 1 FROM messages m JOIN recipients r ON r.thread_id = m.thread_id"
                " WHERE m.id = ? AND r.user_id = ? AND r.is_deleted = 0",
                (message_id, user_id),
            ).fetchone()
            if allowed is None:
                return False
            cursor = conn.execute(
                "INSERT OR IGNORE INTO message_stars (message_id, user_id) VALUES (?, ?)",
                (message_id, user_id),
            )
            return cursor.rowcount > 0

    def unstar_message(self, message_id: int, user_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM message_stars WHERE message_id = ? AND user_id = ?",
                (message_id, user_id),
            )
            return cursor.rowcount > 0

    def unstar_thread(self, thread_id: int, user_id: int) -> bool:
        """Remove every star *user_id* holds in the thread."""
        with self._transaction() as conn:
            access = conn.execute(
                "SELECT 1 FROM recipients WHERE thread_id = ? AND user_id = ? AND is_deleted = 0",
                (thread_id, user_id),
            ).fetchone()
            if access is None:
                return False
            conn.execute(
                "DELETE FROM message_stars WHERE user_id = ? AND message_id IN"
                " (SELECT id FROM messages WHERE thread_id = ?)",
                (user_id, thread_id),
            )
        return True

    # ------------------------------------------------------------------
    # MessageStore — notices
    # ------------------------------------------------------------------

    def send_notice(self, subject: str, content: str, date_sent: str) -> bool:
        """Store a notice as the single active one."""
        if not subject or not content:
            return False
        with self._transaction() as conn:
            conn.execute("UPDATE notices SET is_active = 0 WHERE is_active = 1")
            conn.execute(
                "INSERT INTO notices (subject, message, date_sent, is_active) VALUES (?, ?, ?, 1)",
                (subject, content, date_sent),
            )
        return True

    def active_notice(self) -> dict[str, Any] | None:
        row = self._fetchone("SELECT * FROM notices WHERE is_active = 1")
        return dict(row) if row is not None else None
