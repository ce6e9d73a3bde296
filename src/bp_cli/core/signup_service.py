"""Core signup service — delete, activate, resend and list signups.

The service depends on a :class:`~bp_cli.core.protocols.SignupStore`
and a :class:`~bp_cli.core.protocols.Mailer` injected at construction
time.

Guarantees
----------
* Pure orchestration — no ``print()``, no direct database access.
* Only :class:`~bp_cli.exceptions.BpCliError` subclasses escape.
* Batch deletes yield one :class:`Outcome` per id without rollback.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from bp_cli.core.models import Outcome, Signup
from bp_cli.core.protocols import Mailer, SignupStore
from bp_cli.exceptions import (
    BpCliError,
    InvalidInputError,
    NotFoundError,
    OperationFailedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SignupService:
    """Stateless service over pending registrations.

    Parameters
    ----------
    store:
        Any object satisfying the :class:`SignupStore` protocol.
    mailer:
        Any object satisfying the :class:`Mailer` protocol.
    """

    def __init__(self, store: SignupStore, mailer: Mailer) -> None:
        self._store: SignupStore = store
        self._mailer: Mailer = mailer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def delete(self, signup_ids: Iterable[int]) -> Iterator[Outcome]:
        """Delete each signup in turn, yielding its outcome."""
        for signup_id in signup_ids:
            deleted = self._call("delete", self._store.delete_signup, signup_id)
            logger.debug("delete signup #%d -> %s", signup_id, deleted)
            if deleted:
                yield Outcome(signup_id, True, "Signup deleted.")
            else:
                yield Outcome(signup_id, False, "Could not delete signup.")

    def activate(self, activation_key: str) -> int:
        """Activate the signup owning *activation_key*; return the new user id.

        Raises
        ------
        InvalidInputError
            If the key is empty.
        NotFoundError
            If no pending signup matches the key.
        """
        key = activation_key.strip()
        if not key:
            raise InvalidInputError("Activation key must not be empty.")

        user_id = self._call("activate", self._store.activate_signup, key)
        if user_id is None:
            raise NotFoundError(
                "Signup not activated.",
                hint="No pending signup matches that activation key.",
            )
        logger.debug("activated signup with key %s as user #%d", key, user_id)
        return int(user_id)

    def resend(self, signup_id: int, email: str, activation_key: str) -> None:
        """Re-send the activation email of a pending signup.

        Raises
        ------
        NotFoundError
            If *signup_id* names no signup.
        InvalidInputError
            If *email* or *activation_key* do not belong to the signup.
        OperationFailedError
            If the signup is already active or the mailer refuses it.
        """
        signup = self._call("resend", self._store.get_signup, signup_id)
        if signup is None:
            raise NotFoundError(f"No signup found by that ID: {signup_id}.")

        if signup.user_email.lower() != email.strip().lower():
            raise InvalidInputError(
                "The email does not match this signup.",
                hint=f"Signup #{signup_id} was registered with another address.",
            )
        if signup.activation_key != activation_key.strip():
            raise InvalidInputError("The activation key does not match this signup.")
        if signup.active:
            raise OperationFailedError("This account is already activated.")

        sent = self._call("resend", self._mailer.send_activation_email, signup)
        if not sent:
            raise OperationFailedError("Could not send the activation email.")
        logger.debug("queued activation email for signup #%d", signup_id)

    def list_pending(self, limit: int | None = None) -> list[Signup]:
        """Return pending signups, oldest first, optionally capped."""
        return self._call("list", self._store.list_pending_signups, limit)

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
                f"Unexpected store error during signup {operation}: {exc}",
            ) from exc
