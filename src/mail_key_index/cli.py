"""Command-line interface for the mail key index.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog
from cassandra.cluster import Session

from mail_key_index import __version__
from mail_key_index.backend import connect, shutdown
from mail_key_index.backend.schema import ensure_schema
from mail_key_index.config import get_settings
from mail_key_index.exceptions import MailKeyIndexError
from mail_key_index.index import MailRepositoryKeysDAO

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mail-key-index", description="Mail repository key index")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Schema commands
    schema_parser = subparsers.add_parser("schema", help="Manage the Cassandra schema")
    schema_sub = schema_parser.add_subparsers(dest="schema_command", required=True)
    schema_sub.add_parser("init", help="Create the keyspace and keys table if missing")

    # Key commands
    store_parser = subparsers.add_parser("store", help="Add a mail key to a repository")
    store_parser.add_argument("repository", help="Mail repository name (e.g. memory://var/mail/error)")
    store_parser.add_argument("key", help="Mail key")

    list_parser = subparsers.add_parser("list", help="Print every mail key of a repository")
    list_parser.add_argument("repository", help="Mail repository name")

    remove_parser = subparsers.add_parser("remove", help="Remove a mail key from a repository")
    remove_parser.add_argument("repository", help="Mail repository name")
    remove_parser.add_argument("key", help="Mail key")

    return parser


def _cmd_schema_init(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = connect(settings, use_keyspace=False)
    try:
        ensure_schema(session, settings)
    finally:
        shutdown(session)

    print(f"Schema ready in keyspace {settings.cassandra_keyspace}")
    return 0


async def _run_keys_command(args: argparse.Namespace, session: Session) -> int:
    dao = MailRepositoryKeysDAO(session)

    if args.command == "store":
        await dao.store(args.repository, args.key)
    elif args.command == "remove":
        await dao.remove(args.repository, args.key)
    elif args.command == "list":
        count = 0
        async for key in dao.list_keys(args.repository):
            print(key)
            count += 1
        logger.info("mail_keys_listed", repository_name=args.repository, count=count)

    return 0


def _cmd_keys(args: argparse.Namespace) -> int:
    # Blocking calls; kept outside the event loop.
    session = connect(get_settings())
    try:
        return asyncio.run(_run_keys_command(args, session))
    finally:
        shutdown(session)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the mail key index CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for storage failures, 2 for usage errors).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level, logging.INFO)
        ),
    )

    logger.debug("mail_key_index_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        if parsed.command == "schema" and parsed.schema_command == "init":
            return _cmd_schema_init(parsed)
        if parsed.command in ("store", "list", "remove"):
            return _cmd_keys(parsed)
    except MailKeyIndexError as exc:
        logger.error("command_failed", command=parsed.command, error_type=type(exc).__name__, error=str(exc))
        return 1

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
