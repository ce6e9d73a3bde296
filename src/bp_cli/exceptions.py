"""Custom exception hierarchy for bp-cli.

All exceptions that cross layer boundaries must inherit from
:class:`BpCliError`.  Raw ``sqlite3`` exceptions must NEVER propagate
beyond the infrastructure layer — they are caught and re-raised as
:class:`BackendError`.

Hierarchy
---------
BpCliError
├── UserNotFoundError
├── AccessDeniedError
├── NotFoundError
├── OperationFailedError
├── InvalidInputError
├── ComponentInactiveError
├── BackendError
└── EnvironmentError
"""

from __future__ import annotations


class BpCliError(Exception):
    """Base exception for all bp-cli errors.

    Every operator-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Identifier resolution -------------------------------------------------

class UserNotFoundError(BpCliError):
    """Raised when a user identifier does not resolve to an account."""

    def __init__(
        self,
        message: str = "No user found by that username or ID.",
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)


# --- Access / lookup -------------------------------------------------------

class AccessDeniedError(BpCliError):
    """Raised when a user is not a participant of the requested thread."""


class NotFoundError(BpCliError):
    """Raised when a message, signup or thread does not exist."""


# --- Store operations ------------------------------------------------------

class OperationFailedError(BpCliError):
    """Raised when a create/delete/star/send call reports failure."""


class InvalidInputError(BpCliError):
    """Raised for malformed arguments that cannot fall back to a default."""


# --- Environment / configuration -------------------------------------------

class ComponentInactiveError(BpCliError):
    """Raised when a command group runs while its component is disabled."""


class BackendError(BpCliError):
    """Raised when the database cannot be opened or a query fails."""


class EnvironmentError(BpCliError):
    """Raised when a required runtime dependency is not available."""
