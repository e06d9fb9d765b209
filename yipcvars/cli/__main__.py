"""
yipcvars CLI - Configure the cvars table of a Yip CMS database.

Usage:
    yipcvars initialize 2022-05-01T13:25:00 < vars.json
    yipcvars query epoch
    yipcvars bump 409f
    yipcvars bulk-update < vars.json
    yipcvars invalidate-sessions
    yipcvars reset-credentials
    yipcvars create
"""

import argparse
import logging
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from yipcvars import __version__
from yipcvars.cli.commands import (
    cmd_bulk_update,
    cmd_bump,
    cmd_create,
    cmd_initialize,
    cmd_invalidate_sessions,
    cmd_query,
    cmd_reset_credentials,
)
from yipcvars.config import Settings, get_settings
from yipcvars.controller import CvarController
from yipcvars.types import CvarError, Verb
from yipcvars.validation import parse_verb

logger = logging.getLogger(__name__)

USAGE_SUMMARY = """Syntax:
  yipcvars initialize [datetime] < [json]
  yipcvars query [propname]
  yipcvars bump [lbound]
  yipcvars bulk-update < [json]
  yipcvars invalidate-sessions
  yipcvars reset-credentials
  yipcvars create

Run 'yipcvars <verb> --help' for further information.
"""

_HANDLERS = {
    Verb.INITIALIZE: cmd_initialize,
    Verb.QUERY: cmd_query,
    Verb.BUMP: cmd_bump,
    Verb.BULK_UPDATE: cmd_bulk_update,
    Verb.INVALIDATE_SESSIONS: cmd_invalidate_sessions,
    Verb.RESET_CREDENTIALS: cmd_reset_credentials,
}

_CREATE_COMMANDS = ("create", "createdb")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yipcvars",
        description="Configure the cvars table of a Yip CMS database",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", help="Path to the CMS database (overrides YIP_DB_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # initialize
    p_init = subparsers.add_parser(
        "initialize",
        aliases=["init"],
        help="Set the epoch and populate an empty cvars table (JSON on stdin)",
    )
    p_init.add_argument("datetime", help="Epoch as yyyy-mm-ddThh:mm:ss, floating local time")

    # query
    p_query = subparsers.add_parser("query", aliases=["peek"], help="Show one variable")
    p_query.add_argument("key", help="Variable name (authsecret and authpswd are hidden)")
    p_query.add_argument("--json", "-j", action="store_true")

    # bump
    p_bump = subparsers.add_parser(
        "bump", aliases=["touch"], help="Raise lastmod to at least a floor, then advance it"
    )
    p_bump.add_argument("floor", help="Lower bound as 1 to 8 hex digits")

    # bulk-update
    subparsers.add_parser(
        "bulk-update",
        aliases=["config"],
        help="Change freely mutable variables (JSON on stdin, all optional)",
    )

    # invalidate-sessions
    subparsers.add_parser(
        "invalidate-sessions",
        aliases=["logout"],
        help="Regenerate the cookie secret, logging everyone out",
    )

    # reset-credentials
    subparsers.add_parser(
        "reset-credentials",
        aliases=["forgot"],
        help="Regenerate the cookie secret and require a password reset",
    )

    # create
    subparsers.add_parser(
        "create",
        aliases=["createdb"],
        help="Create a new database holding only an empty cvars table (no CMS content tables)",
    )

    return parser


def load_settings(args) -> Settings:
    """Settings from the environment, with command-line overrides applied."""
    settings = get_settings()
    if args.db:
        settings = settings.model_copy(update={"db_path": Path(args.db)})
    return settings


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        print(USAGE_SUMMARY, end="")
        return

    try:
        settings = load_settings(args)
    except ValueError as e:
        logging.basicConfig(level=logging.WARNING)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level.upper())

    controller = None
    try:
        if args.command in _CREATE_COMMANDS:
            cmd_create(args, settings)
            return
        handler = _HANDLERS[parse_verb(args.command)]
        controller = CvarController.from_settings(settings)
        handler(args, controller)
    except CvarError as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        sys.exit(1)
    finally:
        if controller is not None:
            controller.close()


if __name__ == "__main__":
    main()
