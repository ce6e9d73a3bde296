"""``bp message`` — manage private messages, stars and notices.

Subcommands::

    bp message create --from=<user> --to=<user> [...]
    bp message delete <thread-id>... --user-id=<user> [--yes]
    bp message get <message-id> [--fields=] [--format=]
    bp message list --user-id=<user> [--box=] [--type=] [...]
    bp message generate [--thread-id=] [--count=20]
    bp message star (--message-id=<id> | --thread-id=<id>) --user-id=<user>
    bp message unstar (--message-id=<id> | --thread-id=<id>) --user-id=<user>
    bp message send [--subject=] [--content=]
"""

from __future__ import annotations

import argparse
from typing import Any

from bp_cli.cli import exit_codes
from bp_cli.cli.arguments import add_output_options, non_negative_int, positive_int
from bp_cli.cli.console import line, report_outcomes, success
from bp_cli.cli.formatter import ITEM_FORMATS, LIST_FORMATS, Formatter, parse_fields
from bp_cli.cli.progress import RichProgressTicker
from bp_cli.cli.prompts import confirm
from bp_cli.core.message_service import (
    DEFAULT_GENERATE_COUNT,
    DEFAULT_LIST_COUNT,
    MessageService,
)
from bp_cli.core.resolver import parse_bool
from bp_cli.infra.sqlite_backend import SqliteBackend

COMPONENT = "messages"
COMPONENT_LABEL = "Message"

LIST_FIELDS: tuple[str, ...] = ("id", "subject", "message")


def _service(backend: SqliteBackend) -> MessageService:
    return MessageService(backend, backend)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def _handle_create(args: argparse.Namespace, backend: SqliteBackend) -> int:
    silent = parse_bool(args.silent)
    thread_id = _service(backend).create(
        args.sender,
        args.recipient,
        subject=args.subject,
        content=args.content,
        thread_id=args.thread_id,
        date_sent=args.date_sent,
    )
    if silent:
        return exit_codes.SUCCESS
    if args.porcelain:
        line(thread_id)
    else:
        success("Message successfully created.")
    return exit_codes.SUCCESS


def _handle_delete(args: argparse.Namespace, backend: SqliteBackend) -> int:
    service = _service(backend)
    user = service.resolve_user(args.user_id)
    if not confirm("Are you sure you want to delete this thread(s)?", assume_yes=args.yes):
        return exit_codes.SUCCESS
    return report_outcomes(service.delete_threads(args.thread_ids, user))


def _handle_get(args: argparse.Namespace, backend: SqliteBackend) -> int:
    record = _service(backend).get(args.message_id).to_dict()
    formatter = Formatter(args.format, parse_fields(args.fields, list(record)))
    formatter.display_item(record)
    return exit_codes.SUCCESS


def _handle_list(args: argparse.Namespace, backend: SqliteBackend) -> int:
    formatter = Formatter(args.format, parse_fields(args.fields, LIST_FIELDS))
    messages = _service(backend).list_messages(
        args.user_id,
        box=args.box,
        type=args.type,
        search=args.search,
        count=args.count,
    )
    formatter.display_items([message.to_dict() for message in messages])
    return exit_codes.SUCCESS


def _handle_generate(args: argparse.Namespace, backend: SqliteBackend) -> int:
    with RichProgressTicker("Generating messages", total=args.count) as tick:
        created = _service(backend).generate(
            args.count,
            thread_id=args.thread_id,
            progress_callback=tick,
        )
    success(f"Generated {created} messages.")
    return exit_codes.SUCCESS


def _handle_star(args: argparse.Namespace, backend: SqliteBackend) -> int:
    _service(backend).star(
        args.user_id, message_id=args.message_id, thread_id=args.thread_id,
    )
    success("Message was successfully starred.")
    return exit_codes.SUCCESS


def _handle_unstar(args: argparse.Namespace, backend: SqliteBackend) -> int:
    _service(backend).unstar(
        args.user_id, message_id=args.message_id, thread_id=args.thread_id,
    )
    success("Message was successfully unstarred.")
    return exit_codes.SUCCESS


def _handle_send(args: argparse.Namespace, backend: SqliteBackend) -> int:
    _service(backend).send_notice(args.subject, args.content)
    success("Notice was successfully sent.")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Parser registration
# ---------------------------------------------------------------------------

def _add_star_target(parser: argparse.ArgumentParser) -> None:
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--message-id", type=int, default=None, help="Message ID.")
    target.add_argument("--thread-id", type=int, default=None, help="Thread ID.")
    parser.add_argument(
        "--user-id", required=True, help="User login or numeric ID.",
    )


def register(subparsers: Any) -> None:
    """Add the ``message`` command group to the top-level *subparsers*."""
    group = subparsers.add_parser(
        "message",
        help="Manage private messages.",
        description="Manage private messages.",
    )
    group.set_defaults(
        handler=None,
        group_parser=group,
        component=COMPONENT,
        component_label=COMPONENT_LABEL,
    )
    commands = group.add_subparsers(metavar="<command>")

    create = commands.add_parser("create", aliases=["add"], help="Add a message.")
    create.add_argument("--from", dest="sender", required=True, help="Sender login or ID.")
    create.add_argument("--to", dest="recipient", required=True, help="Recipient login or ID.")
    create.add_argument("--subject", default=None, help="Subject (default: Message Subject).")
    create.add_argument("--content", default=None, help="Content (default: random text).")
    create.add_argument("--thread-id", type=int, default=None, help="Reply within this thread.")
    create.add_argument("--date-sent", default=None, help="YYYY-MM-DD HH:MM:SS (default: now).")
    create.add_argument(
        "--silent",
        nargs="?",
        const="true",
        default="false",
        help="Create without printing anything.",
    )
    create.add_argument("--porcelain", action="store_true", help="Print only the thread ID.")
    create.set_defaults(handler=_handle_create)

    delete = commands.add_parser(
        "delete", aliases=["remove"], help="Delete thread(s) for a given user.",
    )
    delete.add_argument("thread_ids", nargs="+", type=int, metavar="thread-id")
    delete.add_argument("--user-id", required=True, help="User login or numeric ID.")
    delete.add_argument("--yes", action="store_true", help="Answer yes to the confirmation.")
    delete.set_defaults(handler=_handle_delete)

    get = commands.add_parser("get", aliases=["see"], help="Get a message.")
    get.add_argument("message_id", type=int, metavar="message-id")
    add_output_options(get, ITEM_FORMATS, fields_help="Limit the output to specific fields.")
    get.set_defaults(handler=_handle_get)

    listing = commands.add_parser("list", help="List messages of a user.")
    listing.add_argument("--user-id", default=None, help="User login or numeric ID.")
    listing.add_argument("--box", default="sentbox", help="sentbox, inbox or notices.")
    listing.add_argument("--type", default="all", help="all, read or unread.")
    listing.add_argument("--search", default="", help="Search subject and content.")
    listing.add_argument(
        "--count",
        type=positive_int,
        default=DEFAULT_LIST_COUNT,
        help=f"How many messages to list (default: {DEFAULT_LIST_COUNT}).",
    )
    add_output_options(
        listing,
        LIST_FORMATS,
        fields_help=f"Fields to display (default: {','.join(LIST_FIELDS)}).",
    )
    listing.set_defaults(handler=_handle_list)

    generate = commands.add_parser("generate", help="Generate random messages.")
    generate.add_argument("--thread-id", type=int, default=None)
    generate.add_argument(
        "--count",
        type=non_negative_int,
        default=DEFAULT_GENERATE_COUNT,
        help=f"How many messages to generate (default: {DEFAULT_GENERATE_COUNT}).",
    )
    generate.set_defaults(handler=_handle_generate)

    star = commands.add_parser("star", help="Star a message.")
    _add_star_target(star)
    star.set_defaults(handler=_handle_star)

    unstar = commands.add_parser("unstar", help="Unstar a message or a thread.")
    _add_star_target(unstar)
    unstar.set_defaults(handler=_handle_unstar)

    send = commands.add_parser("send", aliases=["send_notice"], help="Send a notice.")
    send.add_argument("--subject", default=None, help="Notice subject.")
    send.add_argument("--content", default=None, help="Notice content.")
    send.set_defaults(handler=_handle_send)
