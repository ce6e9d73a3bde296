"""Protocols (interfaces) consumed by the core layer.

These define the contracts that storage backends must satisfy.  Core
code depends ONLY on these protocols — never on concrete
implementations — so the services can run against the bundled SQLite
backend or any other store that honours the same shape.

Implementations must map all backend-specific exceptions to
:class:`~bp_cli.exceptions.BpCliError` subclasses.  Boolean return
values mean "the store accepted the operation", mirroring the host
platform's API.
"""

from __future__ import annotations

from typing import Protocol

from bp_cli.core.models import Message, MessageQuery, NewMessage, Signup, User


class UserDirectory(Protocol):
    """Read access to existing accounts."""

    def get_user_by_id(self, user_id: int) -> User | None:
        ...  # pragma: no cover

    def get_user_by_login(self, user_login: str) -> User | None:
        ...  # pragma: no cover

    def random_user(self) -> User | None:
        """Return an arbitrary existing user, or ``None`` when empty."""
        ...  # pragma: no cover


class SignupStore(Protocol):
    """Contract for pending-registration storage."""

    def get_signup(self, signup_id: int) -> Signup | None:
        ...  # pragma: no cover

    def list_pending_signups(self, limit: int | None = None) -> list[Signup]:
        ...  # pragma: no cover

    def delete_signup(self, signup_id: int) -> bool:
        ...  # pragma: no cover

    def activate_signup(self, activation_key: str) -> int | None:
        """Activate the pending signup owning *activation_key*.

        Returns the new user id, or ``None`` when no pending signup
        matches the key.
        """
        ...  # pragma: no cover


class Mailer(Protocol):
    """Contract for the outbound notification channel."""

    def send_activation_email(self, signup: Signup) -> bool:
        ...  # pragma: no cover


class MessageStore(Protocol):
    """Contract for threads, messages, stars and notices."""

    def create_message(self, new: NewMessage) -> int | None:
        """Store *new* and return its thread id, or ``None`` on failure."""
        ...  # pragma: no cover

    def get_message(
        self, message_id: int, viewer_id: int | None = None,
    ) -> Message | None:
        ...  # pragma: no cover

    def list_messages(self, query: MessageQuery) -> list[Message]:
        ...  # pragma: no cover

    def check_thread_access(self, thread_id: int, user_id: int) -> int | None:
        """Return the recipient row id when *user_id* may read the thread."""
        ...  # pragma: no cover

    def delete_thread(self, thread_id: int, user_id: int) -> bool:
        ...  # pragma: no cover

    def latest_message_id(self, thread_id: int) -> int | None:
        ...  # pragma: no cover

    def is_message_starred(self, message_id: int, user_id: int) -> bool:
        ...  # pragma: no cover

    def star_message(self, message_id: int, user_id: int) -> bool:
        ...  # pragma: no cover

    def unstar_message(self, message_id: int, user_id: int) -> bool:
        ...  # pragma: no cover

    def unstar_thread(self, thread_id: int, user_id: int) -> bool:
        ...  # pragma: no cover

    def send_notice(self, subject: str, content: str, date_sent: str) -> bool:
        ...  # pragma: no cover
