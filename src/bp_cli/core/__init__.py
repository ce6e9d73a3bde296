"""Core / service layer — argument resolution and command semantics.

Rules
-----
* No ``print()`` calls.
* No direct database access; storage goes through ``protocols``.
* No imports from ``cli`` or ``infra``.
"""

from bp_cli.core.message_service import MessageService
from bp_cli.core.models import Message, MessageQuery, NewMessage, Outcome, Signup, User
from bp_cli.core.protocols import Mailer, MessageStore, SignupStore, UserDirectory
from bp_cli.core.signup_service import SignupService

__all__: list[str] = [
    "Mailer",
    "Message",
    "MessageQuery",
    "MessageService",
    "MessageStore",
    "NewMessage",
    "Outcome",
    "Signup",
    "SignupService",
    "SignupStore",
    "User",
    "UserDirectory",
]
