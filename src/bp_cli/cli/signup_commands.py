"""``bp signup`` — manage pending registrations.

Subcommands::

    bp signup delete <id>... [--yes]
    bp signup activate <activation-key>
    bp signup resend <id> <email> <activation-key>
    bp signup list [--fields=] [--format=] [--count=]
"""

from __future__ import annotations

import argparse
from typing import Any

from bp_cli.cli import exit_codes
from bp_cli.cli.arguments import add_output_options, positive_int
from bp_cli.cli.console import report_outcomes, success
from bp_cli.cli.formatter import LIST_FORMATS, Formatter, parse_fields
from bp_cli.cli.prompts import confirm
from bp_cli.core.signup_service import SignupService
from bp_cli.infra.sqlite_backend import SqliteBackend

COMPONENT = "signups"
COMPONENT_LABEL = "Signup"

SIGNUP_FIELDS: tuple[str, ...] = (
    "id",
    "user_login",
    "user_email",
    "activation_key",
    "registered",
    "active",
)


def _service(backend: SqliteBackend) -> SignupService:
    return SignupService(backend, backend)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _handle_delete(args: argparse.Namespace, backend: SqliteBackend) -> int:
    if not confirm("Are you sure you want to delete this signup(s)?", assume_yes=args.yes):
        return exit_codes.SUCCESS
    return report_outcomes(_service(backend).delete(args.signup_ids))


def _handle_activate(args: argparse.Namespace, backend: SqliteBackend) -> int:
    user_id = _service(backend).activate(args.activation_key)
    success(f"Signup activated, new user (ID #{user_id}).")
    return exit_codes.SUCCESS


def _handle_resend(args: argparse.Namespace, backend: SqliteBackend) -> int:
    _service(backend).resend(args.signup_id, args.email, args.activation_key)
    success("Email sent successfully.")
    return exit_codes.SUCCESS


def _handle_list(args: argparse.Namespace, backend: SqliteBackend) -> int:
    formatter = Formatter(args.format, parse_fields(args.fields, SIGNUP_FIELDS))
    signups = _service(backend).list_pending(args.count)
    formatter.display_items([signup.to_dict() for signup in signups])
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Parser registration
# ---------------------------------------------------------------------------

def register(subparsers: Any) -> None:
    """Add the ``signup`` command group to the top-level *subparsers*."""
    group = subparsers.add_parser(
        "signup",
        help="Manage pending signups.",
        description="Manage pending signups.",
    )
    group.set_defaults(
        handler=None,
        group_parser=group,
        component=COMPONENT,
        component_label=COMPONENT_LABEL,
    )
    commands = group.add_subparsers(metavar="<command>")

    delete = commands.add_parser(
        "delete", aliases=["remove"], help="Delete one or more signups.",
    )
    delete.add_argument("signup_ids", nargs="+", type=int, metavar="id", help="Signup ID(s).")
    delete.add_argument("--yes", action="store_true", help="Answer yes to the confirmation.")
    delete.set_defaults(handler=_handle_delete)

    activate = commands.add_parser("activate", help="Activate a signup.")
    activate.add_argument("activation_key", metavar="activation-key")
    activate.set_defaults(handler=_handle_activate)

    resend = commands.add_parser("resend", help="Resend the activation email.")
    resend.add_argument("signup_id", type=int, metavar="id")
    resend.add_argument("email")
    resend.add_argument("activation_key", metavar="activation-key")
    resend.set_defaults(handler=_handle_resend)

    listing = commands.add_parser("list", help="List pending signups.")
    add_output_options(
        listing,
        LIST_FORMATS,
        fields_help=f"Fields to display (default: {','.join(SIGNUP_FIELDS)}).",
    )
    listing.add_argument(
        "--count", type=positive_int, default=None, help="Maximum number of signups.",
    )
    listing.set_defaults(handler=_handle_list)
