"""Core message service — threads, stars and notices.

This is the central service consumed by the ``message`` command group.
It depends on a :class:`~bp_cli.core.protocols.UserDirectory` and a
:class:`~bp_cli.core.protocols.MessageStore` injected at construction
time.

Guarantees
----------
* Every user identifier is resolved before the store is mutated.
* Only :class:`~bp_cli.exceptions.BpCliError` subclasses escape.
* No ``print()`` — progress is reported through an optional callback.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from bp_cli.core.models import Message, MessageQuery, NewMessage, Outcome, User
from bp_cli.core.protocols import MessageStore, UserDirectory
from bp_cli.core.resolver import (
    current_time,
    normalize_box,
    normalize_type,
    resolve_user,
    validate_date,
)
from bp_cli.core.text import generate_random_text
from bp_cli.exceptions import (
    AccessDeniedError,
    BpCliError,
    InvalidInputError,
    NotFoundError,
    OperationFailedError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SUBJECT = "Message Subject"
DEFAULT_NOTICE_SUBJECT = "Random Notice Subject"
DEFAULT_LIST_COUNT = 10
DEFAULT_GENERATE_COUNT = 20


class MessageService:
    """Stateless service driving every message operation.

    Parameters
    ----------
    users:
        Directory used to resolve user identifiers.
    store:
        Any object satisfying the :class:`MessageStore` protocol.
    rng:
        Random source for placeholder content.  Seed it for
        reproducible output.
    clock:
        Returns the current time in storage layout.
    """

    def __init__(
        self,
        users: UserDirectory,
        store: MessageStore,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], str] = current_time,
    ) -> None:
        self._users: UserDirectory = users
        self._store: MessageStore = store
        self._rng: random.Random = rng if rng is not None else random.Random()
        self._clock: Callable[[], str] = clock

    def resolve_user(self, identifier: str | int | None) -> User:
        """Resolve a numeric ID or login name to a :class:`User`."""
        return resolve_user(self._users, identifier)

    # ------------------------------------------------------------------
    # create / generate
    # ------------------------------------------------------------------

    def create(
        self,
        sender: str | int,
        recipient: str | int,
        *,
        subject: str | None = None,
        content: str | None = None,
        thread_id: int | None = None,
        date_sent: str | None = None,
    ) -> int:
        """Create a message and return its thread id.

        Without *thread_id* a new thread is started between the two
        users; with it the message is appended as a reply.

        Raises
        ------
        UserNotFoundError
            If either identifier does not resolve.
        InvalidInputError
            If *date_sent* is malformed.
        OperationFailedError
            If the store does not yield a thread id.
        """
        sender_user = self.resolve_user(sender)
        recipient_user = self.resolve_user(recipient)

        new = NewMessage(
            sender_id=sender_user.id,
            recipient_ids=(recipient_user.id,),
            subject=subject if subject is not None else DEFAULT_SUBJECT,
            content=content if content is not None else generate_random_text(rng=self._rng),
            date_sent=validate_date(date_sent) if date_sent else self._clock(),
            thread_id=thread_id or None,
        )

        result = self._call("create", self._store.create_message, new)
        if not isinstance(result, int) or isinstance(result, bool):
            raise OperationFailedError("Could not add a message.")

        logger.debug(
            "user #%d wrote to user #%d in thread #%d",
            sender_user.id, recipient_user.id, result,
        )
        return result

    def generate(
        self,
        count: int = DEFAULT_GENERATE_COUNT,
        *,
        thread_id: int | None = None,
        progress_callback: Callable[[], None] | None = None,
    ) -> int:
        """Create *count* messages between random existing users.

        Returns the number of messages created.
        """
        if count < 0:
            raise InvalidInputError("Count must not be negative.")

        for i in range(count):
            sender = self._call("generate", self._users.random_user)
            recipient = self._call("generate", self._users.random_user)
            if sender is None or recipient is None:
                raise UserNotFoundError(
                    "No users available to generate messages.",
                )
            self.create(
                sender.id,
                recipient.id,
                subject=f"{DEFAULT_SUBJECT} - #{i}",
                thread_id=thread_id,
            )
            if progress_callback is not None:
                progress_callback()
        return count

    # ------------------------------------------------------------------
    # delete
    # ------------------------------------------------------------------

    def delete_threads(
        self,
        thread_ids: Iterable[int],
        user: User,
    ) -> Iterator[Outcome]:
        """Delete each thread on behalf of *user*, yielding outcomes.

        Raises
        ------
        AccessDeniedError
            As soon as a thread is not accessible to *user*.  Threads
            handled before it stay deleted.
        """
        for thread_id in thread_ids:
            access = self._call(
                "delete", self._store.check_thread_access, thread_id, user.id,
            )
            if access is None:
                raise AccessDeniedError(
                    "This user has no access to this thread.",
                    hint=f"User #{user.id} is not a participant of thread #{thread_id}.",
                )

            if self._call("delete", self._store.delete_thread, thread_id, user.id):
                yield Outcome(thread_id, True, "Thread successfully deleted.")
            else:
                yield Outcome(thread_id, False, "Could not delete the thread.")

    # ------------------------------------------------------------------
    # get / list
    # ------------------------------------------------------------------

    def get(self, message_id: int) -> Message:
        message = self._call("get", self._store.get_message, message_id)
        if message is None:
            raise NotFoundError(
                "No message found by that ID.",
                hint=f"Message #{message_id} does not exist.",
            )
        return message

    def list_messages(
        self,
        user: str | int | None,
        *,
        box: str | None = None,
        type: str | None = None,
        search: str | None = None,
        count: int = DEFAULT_LIST_COUNT,
    ) -> list[Message]:
        """List messages of *user* in a box.

        Unsupported *box* / *type* values fall back to ``sentbox`` /
        ``all``.

        Raises
        ------
        UserNotFoundError
            If *user* does not resolve.
        NotFoundError
            If nothing matches.
        """
        resolved = self.resolve_user(user)
        query = MessageQuery(
            user_id=resolved.id,
            box=normalize_box(box),
            type=normalize_type(type),
            search=(search or "").strip(),
            limit=count,
        )
        messages = self._call("list", self._store.list_messages, query)
        if not messages:
            raise NotFoundError("No messages found.")
        return messages[:count]

    # ------------------------------------------------------------------
    # star / unstar
    # ------------------------------------------------------------------

    def star(
        self,
        user: str | int,
        *,
        message_id: int | None = None,
        thread_id: int | None = None,
    ) -> int:
        """Star a message, or the latest message of a thread.

        Returns the starred message id.
        """
        resolved = self.resolve_user(user)
        target = self._star_target(message_id, thread_id)

        if self._call("star", self._store.is_message_starred, target, resolved.id):
            raise OperationFailedError("The message is already starred.")
        if not self._call("star", self._store.star_message, target, resolved.id):
            raise OperationFailedError("Message was not starred.")
        return target

    def unstar(
        self,
        user: str | int,
        *,
        message_id: int | None = None,
        thread_id: int | None = None,
    ) -> None:
        """Unstar a message, or every message of a thread."""
        resolved = self.resolve_user(user)

        if message_id is not None:
            done = self._call("unstar", self._store.unstar_message, message_id, resolved.id)
        elif thread_id is not None:
            done = self._call("unstar", self._store.unstar_thread, thread_id, resolved.id)
        else:
            raise InvalidInputError("Either a message ID or a thread ID is required.")

        if not done:
            raise OperationFailedError("Message was not unstarred.")

    def _star_target(self, message_id: int | None, thread_id: int | None) -> int:
        if message_id is not None:
            return message_id
        if thread_id is None:
            raise InvalidInputError("Either a message ID or a thread ID is required.")
        latest = self._call("star", self._store.latest_message_id, thread_id)
        if latest is None:
            raise NotFoundError(f"No thread found by that ID: {thread_id}.")
        return latest

    # ------------------------------------------------------------------
    # notices
    # ------------------------------------------------------------------

    def send_notice(
        self,
        subject: str | None = None,
        content: str | None = None,
    ) -> None:
        """Broadcast a site-wide notice; empty values get defaults."""
        sent = self._call(
            "send",
            self._store.send_notice,
            subject or DEFAULT_NOTICE_SUBJECT,
            content or generate_random_text(rng=self._rng),
            self._clock(),
        )
        if not sent:
            raise OperationFailedError("Notice was not sent.")

    # ------------------------------------------------------------------
    # Store delegation (safe boundary)
    # ------------------------------------------------------------------

    @staticmethod
    def _call(operation: str, func: Callable[..., T], *args: Any) -> T:
        """Call the store and ensure only our exceptions escape."""
        try:
            return func(*args)
        except BpCliError:
            raise
        except Exception as exc:
            raise OperationFailedError(
                f"Unexpected store error during message {operation}: {exc}",
            ) from exc
