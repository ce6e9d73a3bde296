"""Domain models for bp-cli.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  The backend builds them from database
rows; the CLI layer turns them into plain dicts for rendering.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class User:
    """An existing account in the user directory."""

    id: int
    user_login: str
    user_email: str
    display_name: str = ""
    user_registered: str = ""


# ---------------------------------------------------------------------------
# Signups
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Signup:
    """A registration record awaiting (or past) activation."""

    id: int
    """Signup row identifier."""

    user_login: str
    """Login requested at registration time."""

    user_email: str
    """Address the activation email is sent to."""

    activation_key: str
    """Secret key sent to the registrant."""

    registered: str
    """UTC timestamp (``YYYY-MM-DD HH:MM:SS``) of the registration."""

    active: bool = False
    """``True`` once the signup has been activated."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Message:
    """A single message belonging to a thread.

    Notices are surfaced through the same type with ``thread_id`` and
    ``sender_id`` set to ``0``.
    """

    id: int
    thread_id: int
    sender_id: int
    subject: str
    message: str
    """Message body."""

    date_sent: str
    """UTC timestamp (``YYYY-MM-DD HH:MM:SS``)."""

    is_starred: bool = False
    """Starred by the viewing user, or by anyone when no viewer is known."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class NewMessage:
    """Arguments for creating a message (new thread or reply)."""

    sender_id: int
    recipient_ids: tuple[int, ...]
    subject: str
    content: str
    date_sent: str
    thread_id: int | None = None


# ---------------------------------------------------------------------------
# Listing query
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MessageQuery:
    """Filter for listing messages of one user."""

    user_id: int
    box: str = "sentbox"
    type: str = "all"
    search: str = ""
    limit: int = 10


# ---------------------------------------------------------------------------
# Batch outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of one item in a multi-id batch operation."""

    object_id: int
    success: bool
    message: str
