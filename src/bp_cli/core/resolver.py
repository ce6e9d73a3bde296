"""Argument resolution shared by every command.

* User identifiers accept a numeric ID or a login name.
* Box and type choices fall back silently to their defaults.
* Dates are validated against the ``YYYY-MM-DD HH:MM:SS`` layout.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bp_cli.core.models import User
from bp_cli.core.protocols import UserDirectory
from bp_cli.exceptions import InvalidInputError, UserNotFoundError

logger = logging.getLogger(__name__)

MESSAGE_BOXES: tuple[str, ...] = ("notices", "sentbox", "inbox")
MESSAGE_TYPES: tuple[str, ...] = ("all", "read", "unread")

DEFAULT_BOX = "sentbox"
DEFAULT_TYPE = "all"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSY: frozenset[str] = frozenset({"0", "false", "no", "off", ""})


def resolve_user(directory: UserDirectory, identifier: str | int | None) -> User:
    """Resolve *identifier* to an existing :class:`User`.

    Numeric identifiers are looked up by ID first and then, failing
    that, by login so that purely numeric logins stay reachable.

    Raises
    ------
    UserNotFoundError
        When the identifier is empty or matches no account.
    """
    raw = "" if identifier is None else str(identifier).strip()
    if not raw:
        raise UserNotFoundError()

    user: User | None = None
    if raw.isdigit():
        user = directory.get_user_by_id(int(raw))
    if user is None:
        user = directory.get_user_by_login(raw)
    if user is None:
        logger.debug("identifier %r did not resolve to a user", raw)
        raise UserNotFoundError()

    logger.debug("resolved %r to user #%d", raw, user.id)
    return user


def normalize_box(box: str | None) -> str:
    """Return *box* when supported, else the default box."""
    if box in MESSAGE_BOXES:
        return box
    logger.debug("unsupported box %r, falling back to %s", box, DEFAULT_BOX)
    return DEFAULT_BOX


def normalize_type(message_type: str | None) -> str:
    """Return *message_type* when supported, else ``"all"``."""
    if message_type in MESSAGE_TYPES:
        return message_type
    logger.debug("unsupported type %r, falling back to %s", message_type, DEFAULT_TYPE)
    return DEFAULT_TYPE


def current_time() -> str:
    """Current UTC time in the storage date layout."""
    return datetime.now(timezone.utc).strftime(DATE_FORMAT)


def validate_date(value: str) -> str:
    """Return *value* unchanged when it matches :data:`DATE_FORMAT`."""
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise InvalidInputError(
            f"Invalid date: {value}",
            hint="Use the YYYY-MM-DD HH:MM:SS format.",
        ) from exc
    return value


def parse_bool(value: str | bool | None) -> bool:
    """Interpret a flag value given as ``--flag`` or ``--flag=<bool>``."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise InvalidInputError(
        f"Invalid boolean value: {value}",
        hint="Use true or false.",
    )
